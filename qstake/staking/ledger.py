"""
qstake Stake Ledger

Owns one position per staker and runs the staking lifecycle:
stake -> add_to_stake -> set_apy (cycle close, admin only) -> claim_rewards
-> claim_all at maturity.

Every precondition is checked before anything is written, and token pushes
happen before the position is updated, so a rejected or failed operation
leaves the position exactly as it was.
"""

import threading
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from ..addresses import normalize_address
from ..config import LedgerConfig
from ..constants import MAX_APY_BASIS_POINTS, SECONDS_PER_DAY
from ..exceptions import ConfigurationError
from ..logger import get_logger
from ..tokens.erc20 import (
    InsufficientAllowanceError as TokenAllowanceError,
    InsufficientBalanceError as TokenBalanceError,
)
from . import cycles
from .interest import InterestEngine
from .types import (
    AlreadyStakingError,
    AmountTooLargeError,
    ApySetEvent,
    ApyTooLargeError,
    ClaimedAllEvent,
    CycleNotElapsedError,
    DurationOutOfBoundsError,
    FinalApyNotAppliedError,
    FinalCycleInProgressError,
    InsufficientAllowanceError,
    NoActiveStakeError,
    NotAdminError,
    NothingClaimableError,
    RewardsClaimedEvent,
    StakeAddedEvent,
    StakedEvent,
    StakePosition,
    StakeState,
    StakingError,
    StakingFinishedError,
    StillLockedError,
    ZeroAmountError,
)

logger = get_logger(__name__)


def _system_clock() -> int:
    return int(time.time())


class StakeLedger:
    """
    Per-address staking positions backed by a token collaborator.

    The token must provide ``transfer_from(spender, sender, recipient, amount)``,
    ``transfer(sender, recipient, amount)`` and ``balance_of(address)``. Stakes
    and the reward treasury both live on the token account *address*.

    Operations on one staker are serialized by that staker's lock; different
    stakers never contend except inside the token.
    """

    def __init__(
        self,
        token,
        admin: str,
        address: str,
        clock: Optional[Callable[[], int]] = None,
        config: Optional[LedgerConfig] = None,
        engine: Optional[InterestEngine] = None,
    ):
        """
        Args:
            token: Funds collaborator (see class docstring)
            admin: The only address allowed to call set_apy
            address: Token account holding stakes and reward funds
            clock: Returns the current time in whole seconds
            config: Stake ceiling and duration bounds; an empty admin_address
                is filled from *admin*
            engine: Reward calculator

        Raises:
            ConfigurationError: If the config is invalid or names another admin
        """
        self.token = token
        self.admin = normalize_address(admin)
        self.address = normalize_address(address)

        config = replace(config) if config else LedgerConfig()
        if not config.admin_address:
            config.admin_address = self.admin
        config.validate()
        if config.admin_address != self.admin:
            raise ConfigurationError(
                f"Config admin {config.admin_address} does not match ledger admin {self.admin}"
            )
        self.config = config
        self._clock = clock or _system_clock
        self._engine = engine or InterestEngine()

        self._positions: Dict[str, StakePosition] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._events: List[Any] = []
        self._events_lock = threading.Lock()

        logger.info(
            f"Stake ledger opened at {self.address}, admin={self.admin}, "
            f"ceiling={self.config.max_stake_amount}"
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _now(self) -> int:
        return int(self._clock())

    def _lock_for(self, staker: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(staker)
            if lock is None:
                lock = threading.Lock()
                self._locks[staker] = lock
            return lock

    def _active_position(self, staker: str) -> Optional[StakePosition]:
        position = self._positions.get(staker)
        if position is None or not position.active:
            return None
        return position

    def _reject(self, operation: str, staker: str, error: StakingError) -> StakingError:
        logger.warning(f"{operation} rejected for {staker}: {error}")
        return error

    def _emit(self, event) -> None:
        with self._events_lock:
            self._events.append(event)

    def _check_ceiling(self, operation: str, staker: str, total: int) -> None:
        if total > self.config.max_stake_amount:
            raise self._reject(
                operation, staker, AmountTooLargeError(total, self.config.max_stake_amount)
            )

    def _pull(self, operation: str, staker: str, amount: int) -> None:
        """Move *amount* from *staker* into the ledger account."""
        try:
            self.token.transfer_from(self.address, staker, self.address, amount)
        except (TokenAllowanceError, TokenBalanceError) as e:
            raise self._reject(operation, staker, InsufficientAllowanceError(str(e))) from e

    def _push(self, staker: str, amount: int) -> None:
        self.token.transfer(self.address, staker, amount)

    # =========================================================================
    # STAKER OPERATIONS
    # =========================================================================

    def stake(self, caller: str, amount: int, days: int) -> StakePosition:
        """
        Open a position of *amount* locked for *days*.

        Raises:
            AlreadyStakingError, ZeroAmountError, DurationOutOfBoundsError,
            AmountTooLargeError, InsufficientAllowanceError
        """
        staker = normalize_address(caller)
        with self._lock_for(staker):
            if self._active_position(staker) is not None:
                raise self._reject("stake", staker, AlreadyStakingError())
            if amount <= 0:
                raise self._reject("stake", staker, ZeroAmountError())
            if not self.config.min_duration_days <= days <= self.config.max_duration_days:
                raise self._reject("stake", staker, DurationOutOfBoundsError(
                    days, self.config.min_duration_days, self.config.max_duration_days
                ))
            self._check_ceiling("stake", staker, amount)

            self._pull("stake", staker, amount)

            now = self._now()
            position = StakePosition(
                staker=staker,
                principal=amount,
                duration_days=days,
                start_timestamp=now,
                last_cycle_timestamp=now,
            )
            self._positions[staker] = position
            self._emit(StakedEvent(staker, amount, days, timestamp=now))

        logger.info(f"Staked {amount} for {days} days by {staker}")
        return position.copy()

    def add_to_stake(self, caller: str, amount: int) -> StakePosition:
        """
        Queue *amount* as pending; it starts compounding after the next cycle close.

        Raises:
            NoActiveStakeError, ZeroAmountError, FinalCycleInProgressError,
            AmountTooLargeError, InsufficientAllowanceError
        """
        staker = normalize_address(caller)
        with self._lock_for(staker):
            position = self._active_position(staker)
            if position is None:
                raise self._reject("add_to_stake", staker, NoActiveStakeError())
            if amount <= 0:
                raise self._reject("add_to_stake", staker, ZeroAmountError())
            if cycles.is_final_cycle(
                position.last_cycle_timestamp,
                position.start_timestamp,
                position.duration_days,
            ):
                raise self._reject("add_to_stake", staker, FinalCycleInProgressError())
            self._check_ceiling("add_to_stake", staker, position.total_deposited + amount)

            self._pull("add_to_stake", staker, amount)

            position.pending_amount += amount
            self._emit(StakeAddedEvent(staker, amount, timestamp=self._now()))

        logger.info(f"Added {amount} pending to stake of {staker}")
        return position.copy()

    def claim_rewards(self, caller: str) -> int:
        """
        Withdraw all realized reward. Principal and pending are untouched.

        Raises:
            NothingClaimableError
        """
        staker = normalize_address(caller)
        with self._lock_for(staker):
            position = self._active_position(staker)
            if position is None or position.claimable_amount == 0:
                raise self._reject("claim_rewards", staker, NothingClaimableError())

            amount = position.claimable_amount
            self._push(staker, amount)
            position.claimable_amount = 0
            self._emit(RewardsClaimedEvent(staker, amount, timestamp=self._now()))

        logger.info(f"Rewards claimed by {staker}: {amount}")
        return amount

    def claim_all(self, caller: str) -> int:
        """
        Pay out principal plus realized reward of a matured position and close it.

        Raises:
            NoActiveStakeError, StillLockedError, FinalApyNotAppliedError
        """
        staker = normalize_address(caller)
        with self._lock_for(staker):
            position = self._active_position(staker)
            if position is None:
                raise self._reject("claim_all", staker, NoActiveStakeError())
            if not cycles.is_matured(
                position.start_timestamp, position.duration_days, self._now()
            ):
                raise self._reject("claim_all", staker, StillLockedError())
            maturity = cycles.maturity_timestamp(
                position.start_timestamp, position.duration_days
            )
            if position.last_cycle_timestamp < maturity:
                raise self._reject("claim_all", staker, FinalApyNotAppliedError())

            principal = position.principal
            reward = position.claimable_amount
            payout = principal + reward
            self._push(staker, payout)

            position.principal = 0
            position.claimable_amount = 0
            position.active = False
            self._emit(ClaimedAllEvent(staker, principal, reward, timestamp=self._now()))

        logger.info(f"Position of {staker} closed: principal={principal} reward={reward}")
        return payout

    # =========================================================================
    # ADMIN OPERATIONS
    # =========================================================================

    def set_apy(self, admin: str, staker_address: str, new_apy: int) -> int:
        """
        Close the open cycle of *staker_address* at *new_apy*.

        The closed cycle's reward is computed at *new_apy*, compounding on
        principal plus unwithdrawn reward; pending deposits are merged
        afterwards. *new_apy* is then recorded as the position's current APY.
        The cycle grid advances by the cycle length, not to the current time.

        Returns:
            The reward realized for the closed cycle.

        Raises:
            NotAdminError, ApyTooLargeError, NoActiveStakeError,
            StakingFinishedError, CycleNotElapsedError
        """
        caller = normalize_address(admin)
        staker = normalize_address(staker_address)
        if caller != self.admin:
            raise self._reject("set_apy", staker, NotAdminError())
        if not 0 <= new_apy <= MAX_APY_BASIS_POINTS:
            raise self._reject("set_apy", staker, ApyTooLargeError(new_apy, MAX_APY_BASIS_POINTS))

        with self._lock_for(staker):
            position = self._active_position(staker)
            if position is None:
                raise self._reject("set_apy", staker, NoActiveStakeError())

            now = self._now()
            days = cycles.effective_cycle_length(
                position.last_cycle_timestamp,
                position.start_timestamp,
                position.duration_days,
                now,
            )
            if days == 0:
                raise self._reject("set_apy", staker, StakingFinishedError())
            if not cycles.cycle_ready(position.last_cycle_timestamp, now):
                raise self._reject("set_apy", staker, CycleNotElapsedError(
                    f"Next cycle closes at {cycles.next_cycle_timestamp(position.last_cycle_timestamp)}"
                ))

            previous_apy = position.apy
            reward = self._engine.reward(position.staked_balance, new_apy, days)
            merged = position.pending_amount

            position.principal += merged
            position.pending_amount = 0
            position.claimable_amount += reward
            position.apy = new_apy
            position.last_cycle_timestamp += days * SECONDS_PER_DAY

            self._emit(ApySetEvent(
                staker, previous_apy, new_apy, days, reward, merged, timestamp=now
            ))

        logger.info(
            f"Cycle closed for {staker}: {days} days at {new_apy} bp "
            f"(was {previous_apy} bp), reward={reward}, merged={merged}"
        )
        return reward

    # =========================================================================
    # VIEWS
    # =========================================================================

    def total_staked(self, staker_address: str) -> int:
        """Interest-bearing balance (principal plus unwithdrawn reward)."""
        position = self._active_position(normalize_address(staker_address))
        return position.staked_balance if position else 0

    def current_apy(self, staker_address: str) -> int:
        position = self._active_position(normalize_address(staker_address))
        return position.apy if position else 0

    def pending_amount(self, staker_address: str) -> int:
        position = self._active_position(normalize_address(staker_address))
        return position.pending_amount if position else 0

    def claimable_amount(self, staker_address: str) -> int:
        position = self._active_position(normalize_address(staker_address))
        return position.claimable_amount if position else 0

    def position_of(self, staker_address: str) -> Optional[StakePosition]:
        """Snapshot of the staker's position, or None if never staked."""
        position = self._positions.get(normalize_address(staker_address))
        return position.copy() if position else None

    def maturity_of(self, staker_address: str) -> Optional[int]:
        position = self._active_position(normalize_address(staker_address))
        if position is None:
            return None
        return cycles.maturity_timestamp(position.start_timestamp, position.duration_days)

    def next_cycle_at(self, staker_address: str) -> Optional[int]:
        """Earliest close time of the open cycle, None if none is left."""
        position = self._active_position(normalize_address(staker_address))
        if position is None:
            return None
        if position.last_cycle_timestamp >= cycles.maturity_timestamp(
            position.start_timestamp, position.duration_days
        ):
            return None
        return cycles.next_cycle_timestamp(position.last_cycle_timestamp)

    def state_of(self, staker_address: str) -> StakeState:
        position = self._active_position(normalize_address(staker_address))
        if position is None:
            return StakeState.UNINITIALIZED
        if not cycles.is_matured(position.start_timestamp, position.duration_days, self._now()):
            return StakeState.STAKING
        maturity = cycles.maturity_timestamp(position.start_timestamp, position.duration_days)
        if position.last_cycle_timestamp < maturity:
            return StakeState.MATURED_AWAITING_FINAL_APY
        return StakeState.MATURED_CLAIMABLE

    @property
    def events(self) -> List[Any]:
        with self._events_lock:
            return list(self._events)

    def __repr__(self) -> str:
        active = sum(1 for p in self._positions.values() if p.active)
        return f"<StakeLedger {self.address} active={active}>"
