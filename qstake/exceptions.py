"""
qstake Exceptions

Project-wide exception base classes. Ledger operation failures live in
``qstake.staking.types`` and token failures in ``qstake.tokens.erc20``.
"""


class QStakeException(Exception):
    """Base exception for qstake."""
    pass


class InvalidAddressError(QStakeException):
    """Invalid account address format."""
    pass


class ConfigurationError(QStakeException):
    """Configuration error."""
    pass
