"""
ERC-20 Token Ledger

In-memory fungible token with ERC-20 semantics, used as the funds
collaborator of the staking ledger:
  - balanceOf / allowance views
  - transfer, approve, transferFrom
  - owner-only mint for funding the reward treasury
Amounts are integers in the token's base unit.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..addresses import normalize_address
from ..constants import TOKEN_DEFAULT_DECIMALS
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TokenError(Exception):
    """Base exception for token operations."""


class InsufficientBalanceError(TokenError):
    """Raised when sender balance is too low."""


class InsufficientAllowanceError(TokenError):
    """Raised when spender allowance is too low."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every successful transfer or mint."""
    token_symbol: str
    sender: str
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every successful approve."""
    token_symbol: str
    owner: str
    spender: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


# Mint events use the zero address as sender, as ERC-20 does
ZERO_ADDRESS = "0x" + "00" * 20


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class ERC20Token:
    """
    Fungible token with allowance semantics.

        - balance_of(address) -> int
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount)
        - total_supply -> int

    Each mutating call checks and applies its debit/credit under one lock, so
    concurrent callers never observe a half-applied transfer.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = TOKEN_DEFAULT_DECIMALS,
        total_supply: int = 0,
        owner: str = "",
    ):
        """
        Args:
            name: Human-readable token name
            symbol: Short ticker
            decimals: Fractional digits
            total_supply: Initial supply credited to *owner*
            owner: Address allowed to mint
        """
        if not name:
            raise TokenError("Token name cannot be empty")
        if not symbol:
            raise TokenError("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise TokenError(f"Decimals must be 0-18, got {decimals}")
        if total_supply < 0:
            raise TokenError("Total supply cannot be negative")
        if total_supply > 0 and not owner:
            raise TokenError("Initial supply requires an owner")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.owner = normalize_address(owner) if owner else ""
        self._total_supply = total_supply

        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)
        self._events: List[Any] = []
        self._lock = threading.Lock()

        if total_supply > 0:
            self._balances[self.owner] = total_supply

        logger.info(f"Token deployed: {symbol} ({name}), supply={total_supply}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Core ERC-20 operations ────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> TransferEvent:
        """Move *amount* from *sender* to *recipient*."""
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        if amount <= 0:
            raise TokenError("Transfer amount must be positive")

        with self._lock:
            bal = self._balances.get(sender, 0)
            if bal < amount:
                raise InsufficientBalanceError(
                    f"{sender} balance {bal} < transfer amount {amount}"
                )
            self._move(sender, recipient, amount)
            event = TransferEvent(self.symbol, sender, recipient, amount)
            self._events.append(event)

        logger.debug(f"Transfer: {sender} -> {recipient} {amount} {self.symbol}")
        return event

    def approve(self, owner: str, spender: str, amount: int) -> ApprovalEvent:
        """Set *spender*'s allowance over *owner*'s balance."""
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        if amount < 0:
            raise TokenError("Allowance amount cannot be negative")

        with self._lock:
            self._allowances[(owner, spender)] = amount
            event = ApprovalEvent(self.symbol, owner, spender, amount)
            self._events.append(event)

        logger.debug(f"Approve: {owner} -> {spender} allowance={amount} {self.symbol}")
        return event

    def transfer_from(
        self,
        spender: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> TransferEvent:
        """Transfer on behalf of *sender* using *spender*'s allowance."""
        spender = normalize_address(spender)
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        if amount <= 0:
            raise TokenError("Transfer amount must be positive")

        with self._lock:
            allow = self._allowances.get((sender, spender), 0)
            if allow < amount:
                raise InsufficientAllowanceError(
                    f"Allowance {allow} < transfer amount {amount}"
                )
            bal = self._balances.get(sender, 0)
            if bal < amount:
                raise InsufficientBalanceError(
                    f"{sender} balance {bal} < transfer amount {amount}"
                )
            self._move(sender, recipient, amount)
            self._allowances[(sender, spender)] = allow - amount
            event = TransferEvent(self.symbol, sender, recipient, amount)
            self._events.append(event)

        logger.debug(
            f"transferFrom: spender={spender} {sender} -> {recipient} {amount} {self.symbol}"
        )
        return event

    def mint(self, caller: str, recipient: str, amount: int) -> TransferEvent:
        """Owner-only supply increase."""
        caller = normalize_address(caller)
        recipient = normalize_address(recipient)
        if caller != self.owner:
            raise TokenError(f"{caller} is not the token owner")
        if amount <= 0:
            raise TokenError("Mint amount must be positive")

        with self._lock:
            self._total_supply += amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
            event = TransferEvent(self.symbol, ZERO_ADDRESS, recipient, amount)
            self._events.append(event)

        logger.info(f"Mint: {amount} {self.symbol} -> {recipient}")
        return event

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self._balances[sender] = self._balances.get(sender, 0) - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": str(self._total_supply),
            "owner": self.owner,
            "holders": len([b for b in self._balances.values() if b > 0]),
        }

    def __repr__(self) -> str:
        return f"<ERC20Token {self.symbol} supply={self._total_supply}>"
