"""
Scheduled Progression Jobs

Batch work that runs outside a user request:
- Daily quest generation (plus weekly quests on Mondays)
- Weekly reset of area weekly XP
- Monthly reset of profile monthly XP
- Quest expiry and streak-warning candidates

Every job takes a snapshot and returns a new one. Running a job twice for
the same day, week or month changes nothing the second time.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from datetime import date, datetime, timedelta
import random
import logging

from lifequest.models import (
    AcceptedQuest,
    LifeArea,
    ProgressSnapshot,
    QuestTemplate,
    QuestType,
)
from lifequest.gamification.rewards import RandomSource
from lifequest.gamification.streak_system import is_at_risk
from lifequest.utils.datetime_helpers import local_midnight_utc

logger = logging.getLogger(__name__)

DAILY_QUESTS_PER_DAY = 5
WEEKLY_QUESTS_PER_WEEK = 3

_default_rng = random.Random()


@dataclass
class JobResult:
    snapshot: ProgressSnapshot
    changed: bool
    created: List[AcceptedQuest] = field(default_factory=list)


def _pick(templates: Sequence[QuestTemplate], count: int, rng: RandomSource) -> List[QuestTemplate]:
    # Fisher-Yates on a copy, driven by rng.random() only
    pool = list(templates)
    for i in range(len(pool) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:count]


def _instantiate(template: QuestTemplate, created_at: datetime, due_date: date) -> AcceptedQuest:
    return AcceptedQuest(
        template_id=template.id,
        title=template.title,
        description=template.description,
        area=template.area,
        xp_reward=template.xp_reward,
        quest_type=template.quest_type,
        created_at=created_at,
        due_date=due_date,
    )


def generate_daily_quests(
    snapshot: ProgressSnapshot,
    templates: Sequence[QuestTemplate],
    today: date,
    rng: Optional[RandomSource] = None,
    tz_name: Optional[str] = None
) -> JobResult:
    """
    Create today's daily quests (and Monday's weekly quests) for one user

    Skips daily generation when the user already has a daily quest due today
    or later, and weekly generation when weekly quests for this week exist.
    created_at is local midnight of today (tz_name, default APP_TIMEZONE).
    """
    rng = rng or _default_rng
    updated = snapshot.model_copy(deep=True)
    created_at = local_midnight_utc(today, tz_name)
    created: List[AcceptedQuest] = []

    active = [t for t in templates if t.is_active]

    has_daily = any(
        q.quest_type == QuestType.DAILY and q.due_date >= today
        for q in updated.quests
    )
    if has_daily:
        logger.debug(f"User {snapshot.user_id} already has daily quests for {today}")
    else:
        daily_templates = [t for t in active if t.quest_type == QuestType.DAILY]
        for template in _pick(daily_templates, DAILY_QUESTS_PER_DAY, rng):
            created.append(_instantiate(template, created_at, today))

    if today.weekday() == 0:
        week_end = today + timedelta(days=7)
        has_weekly = any(
            q.quest_type == QuestType.WEEKLY and q.due_date == week_end
            for q in updated.quests
        )
        if not has_weekly:
            weekly_templates = [t for t in active if t.quest_type == QuestType.WEEKLY]
            for template in _pick(weekly_templates, WEEKLY_QUESTS_PER_WEEK, rng):
                created.append(_instantiate(template, created_at, week_end))

    updated.quests.extend(created)

    if created:
        logger.info(f"Generated {len(created)} quests for user {snapshot.user_id} on {today}")

    return JobResult(snapshot=updated, changed=bool(created), created=created)


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def apply_weekly_reset(snapshot: ProgressSnapshot, today: date) -> JobResult:
    """Zero weekly XP for every area, at most once per ISO week"""
    updated = snapshot.model_copy(deep=True)
    week_start = _week_start(today)
    changed = False

    for progress in updated.areas.values():
        if progress.weekly_reset_date is not None and progress.weekly_reset_date >= week_start:
            continue
        progress.weekly_xp = 0
        progress.weekly_reset_date = week_start
        changed = True

    if changed:
        logger.info(f"Weekly XP reset for user {snapshot.user_id} (week of {week_start})")

    return JobResult(snapshot=updated, changed=changed)


def apply_monthly_reset(snapshot: ProgressSnapshot, today: date) -> JobResult:
    """
    Zero the profile's monthly XP, at most once per calendar month

    The character level is kept: levels never go down.
    """
    updated = snapshot.model_copy(deep=True)
    month_start = today.replace(day=1)
    profile = updated.profile

    if profile.monthly_reset_date is not None and profile.monthly_reset_date >= month_start:
        return JobResult(snapshot=updated, changed=False)

    profile.monthly_xp = 0
    profile.monthly_reset_date = month_start
    logger.info(f"Monthly XP reset for user {snapshot.user_id} (month of {month_start})")

    return JobResult(snapshot=updated, changed=True)


def find_expired_quests(snapshot: ProgressSnapshot, today: date) -> List[AcceptedQuest]:
    """Open quests whose due date has passed"""
    return [q for q in snapshot.quests if q.is_expired(today)]


def find_streaks_at_risk(snapshot: ProgressSnapshot, today: date) -> List[LifeArea]:
    """Areas whose streak breaks unless something is logged today"""
    return [
        area for area, streak in snapshot.streaks.items()
        if is_at_risk(streak, today)
    ]
