"""
Cycle Scheduler

Maps wall-clock timestamps (seconds) onto the 28-day reward grid of a
position. All functions are pure; the ledger feeds them the position's
timestamps and the current time.
"""

from ..constants import CYCLE_DAYS, CYCLE_SECONDS, SECONDS_PER_DAY


def maturity_timestamp(start_timestamp: int, duration_days: int) -> int:
    return start_timestamp + duration_days * SECONDS_PER_DAY


def elapsed_days(reference_timestamp: int, now: int) -> int:
    """Whole days from *reference_timestamp* to *now*; fractions are dropped."""
    if now <= reference_timestamp:
        return 0
    return (now - reference_timestamp) // SECONDS_PER_DAY


def cycle_ready(last_cycle_timestamp: int, now: int) -> bool:
    """True once a full cycle has elapsed since the last close."""
    return elapsed_days(last_cycle_timestamp, now) >= CYCLE_DAYS


def remaining_days(last_cycle_timestamp: int, start_timestamp: int, duration_days: int) -> int:
    """Whole days between the last close and maturity."""
    return elapsed_days(last_cycle_timestamp, maturity_timestamp(start_timestamp, duration_days))


def effective_cycle_length(
    last_cycle_timestamp: int,
    start_timestamp: int,
    duration_days: int,
    now: int,
) -> int:
    """
    Days the cycle being closed compounds over.

    A full cycle is 28 days; the last cycle of a position is clipped to the
    days left before maturity. Returns 0 when the position has no days left.
    *now* does not change the length: a late close still covers one cycle.
    """
    return min(CYCLE_DAYS, remaining_days(last_cycle_timestamp, start_timestamp, duration_days))


def is_final_cycle(last_cycle_timestamp: int, start_timestamp: int, duration_days: int) -> bool:
    """True when the cycle following *last_cycle_timestamp* reaches maturity."""
    return (
        last_cycle_timestamp + CYCLE_SECONDS
        >= maturity_timestamp(start_timestamp, duration_days)
    )


def is_matured(start_timestamp: int, duration_days: int, now: int) -> bool:
    return now >= maturity_timestamp(start_timestamp, duration_days)


def next_cycle_timestamp(last_cycle_timestamp: int) -> int:
    """Earliest time the open cycle can be closed."""
    return last_cycle_timestamp + CYCLE_SECONDS
