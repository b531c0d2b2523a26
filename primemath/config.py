"""
Configuration loading.

Responsibility: read YAML settings and hand them to the engine and the
benchmark script. No other module reads files.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'config' / 'default.yaml'

DEFAULTS: Dict[str, Any] = {
    'chunk_size': 1000,
    'segment_size': 65536,
    'block_size': 65536,
    'verbose': False,
    'benchmark': {
        'limit': 1_000_000,
        'threads': 8,
        'queries': 2000,
        'seed': 42,
        'output_dir': 'data/results',
    },
}

ENGINE_KEYS = ('chunk_size', 'segment_size', 'block_size', 'verbose')


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a YAML config file and merge it over DEFAULTS.

    Parameters
    ----------
    path : str, optional
        Config file. None returns a copy of DEFAULTS.

    Returns
    -------
    dict
        Merged settings. Nested `benchmark` settings are merged key by key.
    """
    config = copy.deepcopy(DEFAULTS)
    if path is None:
        return config

    with open(path) as f:
        loaded = yaml.safe_load(f) or {}

    unknown = set(loaded) - set(DEFAULTS)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {sorted(unknown)}")

    for key, value in loaded.items():
        if isinstance(config[key], dict):
            config[key].update(value or {})
        else:
            config[key] = value
    return config


def engine_kwargs(config: Dict[str, Any]) -> Dict[str, Any]:
    """Keyword arguments for PrimeState taken from a config mapping."""
    return {key: config[key] for key in ENGINE_KEYS if key in config}
