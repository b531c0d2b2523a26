#!/usr/bin/env python3
"""
Benchmark and verify the prime cache.

Steps:
1. Enumerate primes up to the configured limit
2. Cross-check the cache against the reference sieve
3. Concurrent is_prime queries from several threads
4. Factor random values and check the products

Usage:
    python run_benchmark.py
    python run_benchmark.py --config config/custom.yaml --limit 1e7 --threads 16
"""

import argparse
import math
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np
import pandas as pd

from primemath.config import DEFAULT_CONFIG_PATH, load_config
from primemath.primes import Primes


def flag_table(limit: int) -> np.ndarray:
    """Odd-only Eratosthenes table built in one pass, independent of the cache."""
    flags = np.zeros(limit + 1, dtype=bool)
    if limit < 2:
        return flags
    flags[2] = True
    flags[3::2] = True
    for p in range(3, math.isqrt(limit) + 1, 2):
        if flags[p]:
            flags[p * p::2 * p] = False
    return flags


def bench_enumeration(primes: Primes, limit: int) -> dict:
    """Pull primes from a fresh enumeration until one exceeds limit."""
    t0 = time.time()
    count = 0
    for p in primes.enumerate_primes():
        if p > limit:
            break
        count += 1
    elapsed = time.time() - t0
    print(f"  Enumerated {count:,} primes <= {limit:,} in {elapsed:.2f}s")
    return {'step': 'enumerate', 'items': count, 'seconds': elapsed, 'ok': True}


def verify_against_sieve(primes: Primes, limit: int) -> dict:
    """Cached primes must equal the Eratosthenes table."""
    t0 = time.time()
    cached = primes.state.primes_upto(limit)
    reference = np.flatnonzero(flag_table(limit)).astype(np.uint64)
    ok = np.array_equal(cached, reference)
    elapsed = time.time() - t0
    status = "OK" if ok else f"MISMATCH (cache={len(cached):,}, sieve={len(reference):,})"
    print(f"  Cache vs sieve up to {limit:,}: {status}")
    return {'step': 'verify', 'items': len(reference), 'seconds': elapsed, 'ok': ok}


def bench_concurrent_queries(primes: Primes, limit: int, threads: int,
                             queries: int, rng: np.random.Generator) -> dict:
    """Random is_prime queries from `threads` threads against a fresh cache."""
    values = rng.integers(-limit, limit, size=queries * threads)
    flags = flag_table(limit)
    batches = np.array_split(values, threads)

    def run_batch(batch):
        return [primes.is_prime(int(v)) == bool(flags[abs(int(v))]) for v in batch]

    t0 = time.time()
    with ThreadPoolExecutor(max_workers=threads) as pool:
        results = [r for batch in pool.map(run_batch, batches) for r in batch]
    elapsed = time.time() - t0

    ok = all(results)
    print(f"  {len(values):,} queries on {threads} threads in {elapsed:.2f}s "
          f"({'OK' if ok else f'{results.count(False)} WRONG'})")
    return {'step': 'concurrent_is_prime', 'items': len(values), 'seconds': elapsed, 'ok': ok}


def bench_factor(primes: Primes, limit: int, queries: int,
                 rng: np.random.Generator) -> dict:
    """Factor random values; product must round-trip and factors must be prime."""
    values = rng.integers(1, limit, size=queries)

    t0 = time.time()
    wrong = 0
    for v in values.tolist():
        factors = list(primes.factor(v))
        if math.prod(factors) != v or not all(primes.is_prime(f) for f in factors):
            wrong += 1
    elapsed = time.time() - t0

    print(f"  Factored {len(values):,} values in {elapsed:.2f}s "
          f"({'OK' if wrong == 0 else f'{wrong} WRONG'})")
    return {'step': 'factor', 'items': len(values), 'seconds': elapsed, 'ok': wrong == 0}


def main():
    parser = argparse.ArgumentParser(description='Benchmark the prime cache')
    parser.add_argument('--config', type=str, default=str(DEFAULT_CONFIG_PATH),
                        help='Path to config file')
    parser.add_argument('--limit', type=float, default=None, help='Override benchmark.limit')
    parser.add_argument('--threads', type=int, default=None, help='Override benchmark.threads')
    args = parser.parse_args()

    config = load_config(args.config)
    bench = config['benchmark']
    limit = int(args.limit) if args.limit is not None else int(bench['limit'])
    threads = args.threads if args.threads is not None else int(bench['threads'])
    rng = np.random.default_rng(bench['seed'])

    print("=" * 60)
    print("Prime Cache Benchmark")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  limit = {limit:,}")
    print(f"  threads = {threads}")
    print(f"  queries = {bench['queries']:,} per thread")
    print(f"  chunk_size = {config['chunk_size']}")
    print(f"  segment_size = {config['segment_size']}")
    print()

    rows = []
    total_start = time.time()

    print("-" * 60)
    print("1. Enumeration")
    print("-" * 60)
    primes = Primes(config=config)
    rows.append(bench_enumeration(primes, limit))
    print()

    print("-" * 60)
    print("2. Verification against reference sieve")
    print("-" * 60)
    rows.append(verify_against_sieve(primes, limit))
    print()

    print("-" * 60)
    print("3. Concurrent queries (fresh cache)")
    print("-" * 60)
    rows.append(bench_concurrent_queries(Primes(config=config), limit, threads,
                                         bench['queries'], rng))
    print()

    print("-" * 60)
    print("4. Factoring")
    print("-" * 60)
    rows.append(bench_factor(primes, limit, bench['queries'], rng))
    print()

    df = pd.DataFrame(rows)
    output_dir = Path(bench['output_dir'])
    output_dir.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_dir / 'benchmark.csv', index=False)

    print("=" * 60)
    print("COMPLETE" if df['ok'].all() else "FAILED")
    print("=" * 60)
    print(f"\nTotal runtime: {time.time() - total_start:.1f}s")
    print(f"Cache: {primes.state!r}")
    print()
    print(df.to_string(index=False))
    print(f"\nOutputs saved to: {(output_dir / 'benchmark.csv').absolute()}")


if __name__ == '__main__':
    main()
