"""
Multi-Area Streak Tracking System

Tracks one streak per life area:
- physical, mental, productivity, social, financial, personal, spiritual

Transition on a logged activity (given today and last_activity_date):
- Same day: already counted, no change
- Previous day: current_count + 1
- Any other gap (or first activity): restart at 1
- longest_count follows current_count upward
- last_activity_date becomes today

Freeze tokens are spent separately from logging. A token covers one missed
day: it is only accepted while the streak is at risk (last covered day was
yesterday) and moves last_activity_date to today without counting the day,
so the next real activity continues the streak. A broken streak cannot be
revived and an already covered day does not consume a token.

All functions work on copies; the Streak passed in is never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from datetime import date, timedelta
import logging

from lifequest.models import Streak

logger = logging.getLogger(__name__)

STREAK_MILESTONES = (7, 14, 30, 100)

NO_FREEZE_AVAILABLE = "no_freeze_available"
STREAK_NOT_AT_RISK = "streak_not_at_risk"
DAY_ALREADY_COVERED = "day_already_covered"


class StreakState(str, Enum):
    """Derived streak state"""
    NONE = "none"          # never logged
    ACTIVE = "active"
    FROZEN = "frozen"      # last covered day was protected by a freeze token
    BROKEN = "broken"      # gap of 2+ days since last covered day


@dataclass
class StreakUpdate:
    """Outcome of recording an activity"""
    streak: Streak
    previous_count: int
    counted: bool  # False when today was already counted
    milestone: Optional[int] = None

    @property
    def was_reset(self) -> bool:
        return self.counted and self.streak.current_count == 1 and self.previous_count > 0


@dataclass
class FreezeResult:
    """Outcome of spending a freeze token

    success=False with reason NO_FREEZE_AVAILABLE is the NoFreezeAvailable
    variant. The other refusal reasons keep the token too.
    """
    success: bool
    streak: Streak
    reason: Optional[str] = None

    @property
    def no_freeze_available(self) -> bool:
        return self.reason == NO_FREEZE_AVAILABLE


def record_activity(streak: Streak, today: date) -> StreakUpdate:
    """
    Apply one logged activity to a streak

    Args:
        streak: Current streak state for the user and area
        today: Calendar day of the activity

    Returns:
        StreakUpdate with the new streak copy
    """
    updated = streak.model_copy()
    previous_count = streak.current_count
    last_date = streak.last_activity_date

    if last_date == today:
        return StreakUpdate(streak=updated, previous_count=previous_count, counted=False)

    if last_date is not None and last_date == today - timedelta(days=1):
        updated.current_count += 1
    else:
        if previous_count > 0:
            logger.info(
                f"{streak.area.value} streak broken at {previous_count} days "
                f"(last activity {last_date}, today {today})"
            )
        updated.current_count = 1

    updated.longest_count = max(updated.longest_count, updated.current_count)
    updated.last_activity_date = today

    milestone = updated.current_count if updated.current_count in STREAK_MILESTONES else None
    if milestone:
        logger.info(f"{streak.area.value} streak reached {milestone}-day milestone")

    return StreakUpdate(
        streak=updated,
        previous_count=previous_count,
        counted=True,
        milestone=milestone,
    )


def use_freeze(streak: Streak, today: date) -> FreezeResult:
    """
    Spend a freeze token to cover today without an activity

    Returns:
        FreezeResult; on refusal success is False, reason says why and the
        streak (token count included) is returned unchanged
    """
    if streak.freeze_count <= 0:
        return FreezeResult(success=False, streak=streak.model_copy(), reason=NO_FREEZE_AVAILABLE)

    if streak.last_activity_date == today:
        return FreezeResult(success=False, streak=streak.model_copy(), reason=DAY_ALREADY_COVERED)

    if not is_at_risk(streak, today):
        logger.info(
            f"Freeze refused for {streak.area.value} streak on {today}: "
            f"last covered day {streak.last_activity_date}"
        )
        return FreezeResult(success=False, streak=streak.model_copy(), reason=STREAK_NOT_AT_RISK)

    updated = streak.model_copy()
    updated.freeze_count -= 1
    updated.last_activity_date = today
    updated.last_freeze_date = today

    logger.info(
        f"Freeze token used for {streak.area.value} streak on {today}. "
        f"{updated.freeze_count} remaining"
    )
    return FreezeResult(success=True, streak=updated)


def grant_freeze(streak: Streak, count: int = 1) -> Streak:
    """Return a copy of the streak with extra freeze tokens"""
    updated = streak.model_copy()
    updated.freeze_count += count
    return updated


def get_streak_state(streak: Streak, today: date) -> StreakState:
    """Classify a streak relative to today"""
    last_date = streak.last_activity_date
    if last_date is None or streak.current_count == 0:
        return StreakState.NONE

    if (today - last_date).days >= 2:
        return StreakState.BROKEN
    if streak.last_freeze_date is not None and streak.last_freeze_date == last_date:
        return StreakState.FROZEN
    return StreakState.ACTIVE


def is_at_risk(streak: Streak, today: date) -> bool:
    """Streak still intact from yesterday but nothing logged yet today"""
    return (
        streak.current_count > 0
        and streak.last_activity_date is not None
        and streak.last_activity_date == today - timedelta(days=1)
    )


def days_since_activity(streak: Streak, today: date) -> Optional[int]:
    if streak.last_activity_date is None:
        return None
    return (today - streak.last_activity_date).days
