"""
qstake TOML Configuration Loader

Loads the [ledger] section of config.toml with environment variable overrides
(dataclass + from_dict + from_file + apply_env).

Environment variable mapping:
    [ledger] admin_address    → QSTAKE_ADMIN_ADDRESS
    [ledger] max_stake_amount → QSTAKE_MAX_STAKE_AMOUNT
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..addresses import is_valid_address, normalize_address
from ..constants import (
    MAX_STAKE_AMOUNT,
    MAX_STAKE_DAYS,
    MIN_STAKE_DAYS,
    TOKEN_DEFAULT_SYMBOL,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class LedgerConfig:
    """[ledger] section."""
    admin_address: str = ""
    max_stake_amount: int = MAX_STAKE_AMOUNT
    min_duration_days: int = MIN_STAKE_DAYS
    max_duration_days: int = MAX_STAKE_DAYS
    token_symbol: str = TOKEN_DEFAULT_SYMBOL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerConfig":
        return cls(
            admin_address=data.get("admin_address", ""),
            max_stake_amount=int(data.get("max_stake_amount", MAX_STAKE_AMOUNT)),
            min_duration_days=int(data.get("min_duration_days", MIN_STAKE_DAYS)),
            max_duration_days=int(data.get("max_duration_days", MAX_STAKE_DAYS)),
            token_symbol=data.get("token_symbol", TOKEN_DEFAULT_SYMBOL),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "LedgerConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults.
        """
        path = Path(config_path)
        if not path.exists():
            logger.debug(f"Config file {path} not found, using defaults")
            return cls()

        with open(path, "rb") as f:
            try:
                config_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

        return cls.from_dict(config_data.get("ledger", {}))

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("QSTAKE_ADMIN_ADDRESS"):
            self.admin_address = v
        if v := os.environ.get("QSTAKE_MAX_STAKE_AMOUNT"):
            try:
                self.max_stake_amount = int(v)
            except ValueError as e:
                raise ConfigurationError(f"QSTAKE_MAX_STAKE_AMOUNT is not an integer: {v!r}") from e

    def validate(self) -> bool:
        """
        Validate configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.admin_address:
            raise ConfigurationError("admin_address is required")
        if not is_valid_address(self.admin_address):
            raise ConfigurationError(f"admin_address is not a valid address: {self.admin_address!r}")
        if not 0 < self.max_stake_amount <= MAX_STAKE_AMOUNT:
            raise ConfigurationError(
                f"max_stake_amount must be in (0, {MAX_STAKE_AMOUNT}], got {self.max_stake_amount}"
            )
        if not MIN_STAKE_DAYS <= self.min_duration_days <= self.max_duration_days <= MAX_STAKE_DAYS:
            raise ConfigurationError(
                f"duration bounds must satisfy {MIN_STAKE_DAYS} <= min <= max <= {MAX_STAKE_DAYS}"
            )
        self.admin_address = normalize_address(self.admin_address)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "admin_address": self.admin_address,
            "max_stake_amount": str(self.max_stake_amount),
            "min_duration_days": self.min_duration_days,
            "max_duration_days": self.max_duration_days,
            "token_symbol": self.token_symbol,
        }


def load_config(config_path: Optional[str] = None) -> LedgerConfig:
    """
    Load, override from env, and validate the ledger configuration.

    Args:
        config_path: TOML file; defaults to ``QSTAKE_CONFIG_PATH``.
    """
    from ..constants import QSTAKE_ADMIN_ADDRESS, QSTAKE_CONFIG_PATH

    path = config_path or os.environ.get("QSTAKE_CONFIG_PATH") or str(QSTAKE_CONFIG_PATH)
    config = LedgerConfig.from_file(path)
    config.apply_env()
    # .env value is the last resort for the admin
    if not config.admin_address and QSTAKE_ADMIN_ADDRESS:
        config.admin_address = str(QSTAKE_ADMIN_ADDRESS)
    config.validate()
    logger.info(f"Ledger config loaded from {path}: admin={config.admin_address}")
    return config
