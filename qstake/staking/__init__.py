"""
qstake Staking

Provides:
  - StakeLedger     : per-address positions, cycle closes, claims
  - InterestEngine  : daily-compounding reward calculator
  - cycles          : 28-day cycle grid helpers
  - StakePosition / StakeState and the StakingError taxonomy
"""

from . import cycles
from .interest import InterestEngine, reward
from .ledger import StakeLedger
from .types import (
    StakePosition,
    StakeState,
    StakingError,
    NotAdminError,
    ZeroAmountError,
    DurationOutOfBoundsError,
    ApyTooLargeError,
    AmountTooLargeError,
    AlreadyStakingError,
    NoActiveStakeError,
    FinalCycleInProgressError,
    StakingFinishedError,
    CycleNotElapsedError,
    StillLockedError,
    FinalApyNotAppliedError,
    InsufficientAllowanceError,
    NothingClaimableError,
    StakedEvent,
    StakeAddedEvent,
    ApySetEvent,
    RewardsClaimedEvent,
    ClaimedAllEvent,
)

__all__ = [
    "cycles",
    "InterestEngine",
    "reward",
    "StakeLedger",
    "StakePosition",
    "StakeState",
    # Errors
    "StakingError",
    "NotAdminError",
    "ZeroAmountError",
    "DurationOutOfBoundsError",
    "ApyTooLargeError",
    "AmountTooLargeError",
    "AlreadyStakingError",
    "NoActiveStakeError",
    "FinalCycleInProgressError",
    "StakingFinishedError",
    "CycleNotElapsedError",
    "StillLockedError",
    "FinalApyNotAppliedError",
    "InsufficientAllowanceError",
    "NothingClaimableError",
    # Events
    "StakedEvent",
    "StakeAddedEvent",
    "ApySetEvent",
    "RewardsClaimedEvent",
    "ClaimedAllEvent",
]
