"""
qstake Staking Types and Exceptions

Core data types for the staking ledger: the per-staker position record, its
lifecycle states, the operation error taxonomy and the emitted events.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict

from ..exceptions import QStakeException


class StakeState(Enum):
    """Position lifecycle status."""
    UNINITIALIZED = "uninitialized"                  # No position, or claimed out
    STAKING = "staking"                              # Locked, cycles still open
    MATURED_AWAITING_FINAL_APY = "awaiting_final"    # Past maturity, terminal cycle open
    MATURED_CLAIMABLE = "claimable"                  # Terminal cycle closed


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class StakingError(QStakeException):
    """
    Base exception for ledger operations.

    ``code`` is the stable, machine-matchable identifier of the failure and
    ``category`` groups related failures.
    """
    code: str = "StakingError"
    category: str = "staking"

    def __init__(self, message: str = None):
        super().__init__(message or self.__doc__.strip())

    def __str__(self) -> str:
        return f"[{self.code}] {super().__str__()}"


# -- Authorization -----------------------------------------------------

class NotAdminError(StakingError):
    """Caller is not the ledger administrator."""
    code = "NotAdmin"
    category = "authorization"


# -- Input validation --------------------------------------------------

class ZeroAmountError(StakingError):
    """Amount must be greater than zero."""
    code = "ZeroAmount"
    category = "validation"


class DurationOutOfBoundsError(StakingError):
    """Stake duration is outside the allowed range."""
    code = "DurationOutOfBounds"
    category = "validation"

    def __init__(self, days: int, min_days: int, max_days: int):
        self.days = days
        super().__init__(f"Duration {days} days outside [{min_days}, {max_days}]")


class ApyTooLargeError(StakingError):
    """APY exceeds the maximum."""
    code = "ApyTooLarge"
    category = "validation"

    def __init__(self, apy: int, max_apy: int):
        self.apy = apy
        super().__init__(f"APY {apy} bp exceeds maximum {max_apy} bp")


class AmountTooLargeError(StakingError):
    """Position would exceed the maximum stake amount."""
    code = "AmountTooLarge"
    category = "validation"

    def __init__(self, total: int, ceiling: int):
        self.total = total
        self.ceiling = ceiling
        super().__init__(f"Position total {total} exceeds ceiling {ceiling}")


# -- State conflict ----------------------------------------------------

class AlreadyStakingError(StakingError):
    """Caller already has an active position."""
    code = "AlreadyStaking"
    category = "state"


class NoActiveStakeError(StakingError):
    """No active position for this address."""
    code = "NoActiveStake"
    category = "state"


class FinalCycleInProgressError(StakingError):
    """The current cycle is the last one; deposits can no longer compound."""
    code = "FinalCycleInProgress"
    category = "state"


class StakingFinishedError(StakingError):
    """The terminal cycle of this position has already been closed."""
    code = "StakingFinished"
    category = "state"


# -- Timing ------------------------------------------------------------

class CycleNotElapsedError(StakingError):
    """The current cycle has not run its full length yet."""
    code = "CycleNotElapsed"
    category = "timing"


class StillLockedError(StakingError):
    """Position has not reached maturity."""
    code = "StillLocked"
    category = "timing"


class FinalApyNotAppliedError(StakingError):
    """Position matured but its terminal cycle has not been closed."""
    code = "FinalApyNotApplied"
    category = "timing"


# -- Funds -------------------------------------------------------------

class InsufficientAllowanceError(StakingError):
    """Token pull failed: allowance or balance too low."""
    code = "InsufficientAllowance"
    category = "funds"


class NothingClaimableError(StakingError):
    """No realized reward to claim."""
    code = "NothingClaimable"
    category = "funds"


# ══════════════════════════════════════════════════════════════════════
#  POSITION
# ══════════════════════════════════════════════════════════════════════

@dataclass
class StakePosition:
    """
    A single staker's position.

    Attributes:
        staker: Checksum address of the owner
        principal: Deposited amount merged into the position
        pending_amount: Added deposit awaiting the next cycle close
        duration_days: Lock length, immutable
        start_timestamp: Creation time (seconds), immutable
        last_cycle_timestamp: End of the most recently closed cycle
        apy: Basis points of the most recent cycle close
        claimable_amount: Realized reward not yet withdrawn
        active: False once the position is claimed out
    """
    staker: str
    principal: int
    duration_days: int
    start_timestamp: int
    last_cycle_timestamp: int
    pending_amount: int = 0
    apy: int = 0
    claimable_amount: int = 0
    active: bool = True

    @property
    def staked_balance(self) -> int:
        """Interest-bearing balance: principal plus unwithdrawn reward."""
        return self.principal + self.claimable_amount

    @property
    def total_deposited(self) -> int:
        return self.principal + self.pending_amount + self.claimable_amount

    def copy(self) -> "StakePosition":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'staker': self.staker,
            'principal': str(self.principal),
            'pending_amount': str(self.pending_amount),
            'claimable_amount': str(self.claimable_amount),
            'duration_days': self.duration_days,
            'start_timestamp': self.start_timestamp,
            'last_cycle_timestamp': self.last_cycle_timestamp,
            'apy': self.apy,
            'active': self.active,
        }


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StakedEvent:
    """Emitted when a position is opened."""
    staker: str
    amount: int
    duration_days: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Staked",
            "staker": self.staker,
            "amount": str(self.amount),
            "durationDays": self.duration_days,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class StakeAddedEvent:
    """Emitted when a deposit is queued as pending."""
    staker: str
    amount: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "StakeAdded",
            "staker": self.staker,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ApySetEvent:
    """Emitted when the admin closes a cycle."""
    staker: str
    previous_apy: int
    new_apy: int
    cycle_days: int
    reward: int
    merged_pending: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ApySet",
            "staker": self.staker,
            "previousApy": self.previous_apy,
            "newApy": self.new_apy,
            "cycleDays": self.cycle_days,
            "reward": str(self.reward),
            "mergedPending": str(self.merged_pending),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RewardsClaimedEvent:
    """Emitted when realized reward is withdrawn."""
    staker: str
    amount: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RewardsClaimed",
            "staker": self.staker,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ClaimedAllEvent:
    """Emitted when a matured position is paid out and closed."""
    staker: str
    principal: int
    reward: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ClaimedAll",
            "staker": self.staker,
            "principal": str(self.principal),
            "reward": str(self.reward),
            "timestamp": self.timestamp,
        }
