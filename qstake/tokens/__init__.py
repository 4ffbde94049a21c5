"""
Token collaborator for the staking ledger.

Provides:
  - ERC20Token : in-memory fungible token with allowance semantics
"""

from .erc20 import (
    ERC20Token,
    TransferEvent,
    ApprovalEvent,
    TokenError,
    InsufficientBalanceError,
    InsufficientAllowanceError,
)

__all__ = [
    "ERC20Token",
    "TransferEvent",
    "ApprovalEvent",
    "TokenError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
]
