"""
Daily Login Bonus

Bonus tiers, first match wins:
- Day 7 of a login streak: 50 XP
- Every other 7th day: 25 XP
- Day 14 and beyond: 10 XP
- Otherwise: 5 XP

The day-14 tier can only fire on days that are not multiples of 7. The
order is kept exactly as the product defines it.
"""

from dataclasses import dataclass
from typing import Optional
from datetime import date, timedelta
import logging

from lifequest.models import DailyLoginRecord

logger = logging.getLogger(__name__)

BASE_LOGIN_BONUS = 5


@dataclass(frozen=True)
class DailyLoginEvaluation:
    consecutive_days: int
    bonus_xp: int
    already_claimed_today: bool

    def to_record(self, today: date) -> DailyLoginRecord:
        return DailyLoginRecord(
            login_date=today,
            consecutive_days=self.consecutive_days,
            bonus_claimed=True,
        )


def login_bonus_for(consecutive_days: int) -> int:
    """XP bonus for the given login streak length"""
    if consecutive_days == 7:
        return 50
    if consecutive_days % 7 == 0:
        return 25
    if consecutive_days >= 14:
        return 10
    return BASE_LOGIN_BONUS


def evaluate_daily_login(
    today: date,
    yesterday_record: Optional[DailyLoginRecord] = None,
    today_record: Optional[DailyLoginRecord] = None
) -> DailyLoginEvaluation:
    """
    Work out the login streak and bonus for today

    Args:
        today: Calendar day of the login
        yesterday_record: Login record for the previous day, if any
        today_record: Existing record for today, if the user already logged in

    Returns:
        DailyLoginEvaluation; bonus_xp is 0 when today was already claimed
    """
    if today_record is not None:
        return DailyLoginEvaluation(
            consecutive_days=today_record.consecutive_days,
            bonus_xp=0,
            already_claimed_today=True,
        )

    if yesterday_record is not None and yesterday_record.login_date != today - timedelta(days=1):
        logger.debug(
            f"Ignoring login record from {yesterday_record.login_date}, not the day before {today}"
        )
        yesterday_record = None

    consecutive_days = yesterday_record.consecutive_days + 1 if yesterday_record else 1

    return DailyLoginEvaluation(
        consecutive_days=consecutive_days,
        bonus_xp=login_bonus_for(consecutive_days),
        already_claimed_today=False,
    )
