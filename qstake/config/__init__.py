"""
qstake Configuration

Loads the [ledger] section of config.toml.
Environment variables override TOML values.
"""

from .loader import LedgerConfig, load_config

__all__ = [
    "LedgerConfig",
    "load_config",
]
