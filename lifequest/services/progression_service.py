"""
ProgressionService - Progression Business Logic

Single entry point for every XP, level, streak and quest mutation. Each
command takes a ProgressSnapshot, validates its input before touching
anything, and returns a new snapshot plus the domain events it produced.
The snapshot passed in is never modified.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union
from datetime import datetime, timedelta

from lifequest import config
from lifequest.exceptions import RecordNotFoundError, ValidationError
from lifequest.gamification.daily_login import DailyLoginEvaluation, evaluate_daily_login
from lifequest.gamification.quest_recommender import recommend_quests
from lifequest.gamification.rewards import RandomSource, RewardKind, RewardOutcome, roll_reward
from lifequest.gamification.streak_system import (
    FreezeResult,
    StreakUpdate,
    grant_freeze,
    record_activity,
    use_freeze,
)
from lifequest.gamification.xp_system import apply_xp
from lifequest.models import (
    AcceptedQuest,
    ActivityLogEntry,
    LevelUp,
    LifeArea,
    ProgressSnapshot,
    ProgressionEvent,
    QuestCompleted,
    QuestSuggestion,
    QuestTemplate,
    QuestType,
    RewardGranted,
    StreakMilestone,
)
from lifequest.observability.metrics import (
    record_freeze,
    record_level_up,
    record_reward,
    record_xp,
)
from lifequest.utils.datetime_helpers import local_date, now_utc, to_utc

logger = logging.getLogger(__name__)

CHARACTER_SCOPE = "character"

QUEST_DURATION = {
    QuestType.DAILY: timedelta(days=1),
    QuestType.WEEKLY: timedelta(days=7),
}


@dataclass
class ProgressionResult:
    """New snapshot plus everything a command produced"""
    snapshot: ProgressSnapshot
    events: List[ProgressionEvent] = field(default_factory=list)
    xp_awarded: int = 0
    reward: Optional[RewardOutcome] = None
    streak_update: Optional[StreakUpdate] = None
    freeze: Optional[FreezeResult] = None
    login: Optional[DailyLoginEvaluation] = None
    quest: Optional[AcceptedQuest] = None
    # False when the command was refused or a no-op; nothing needs saving
    changed: bool = True

    @property
    def level_ups(self) -> List[LevelUp]:
        return [e for e in self.events if isinstance(e, LevelUp)]


class ProgressionService:
    """
    Service for progression rules.

    Responsibilities:
    - Activity logging (XP, levels, streaks, variable rewards)
    - Streak freeze tokens
    - Daily login bonus
    - Quest acceptance, completion and recommendations
    """

    def __init__(
        self,
        level_xp_base: int = config.LEVEL_XP_BASE,
        weekly_target: int = config.WEEKLY_XP_TARGET,
        recommendation_limit: int = config.RECOMMENDATION_LIMIT,
        min_activity_xp: int = config.MIN_ACTIVITY_XP,
        max_activity_xp: int = config.MAX_ACTIVITY_XP,
        rng: Optional[RandomSource] = None,
        tz_name: Optional[str] = None
    ):
        """
        Initialize ProgressionService.

        Args:
            level_xp_base: XP per level step
            weekly_target: Weekly XP goal per area (recommendations)
            recommendation_limit: Number of quest suggestions returned
            min_activity_xp: Smallest XP value an activity may carry
            max_activity_xp: Largest XP value an activity may carry
            rng: Random source for reward rolls
            tz_name: Timezone for calendar days (defaults to APP_TIMEZONE)
        """
        self.level_xp_base = level_xp_base
        self.weekly_target = weekly_target
        self.recommendation_limit = recommendation_limit
        self.min_activity_xp = min_activity_xp
        self.max_activity_xp = max_activity_xp
        self.rng = rng or random.Random()
        self.tz_name = tz_name
        logger.debug("ProgressionService initialized")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def log_activity(
        self,
        snapshot: ProgressSnapshot,
        area: Union[LifeArea, str],
        base_xp: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        """
        Log a completed activity.

        Args:
            snapshot: Current progress snapshot
            area: Life area of the activity
            base_xp: XP value of the activity
            notes: Optional free text
            now: When the activity was completed (defaults to now)

        Returns:
            ProgressionResult with reward, streak update and events
        """
        area = self._resolve_area(area, snapshot.user_id, "log_activity")
        self._validate_activity_xp(base_xp, snapshot.user_id)
        self._require_area_rows(snapshot, area, "log_activity")

        now = to_utc(now or now_utc())
        today = local_date(now, self.tz_name)

        updated = snapshot.model_copy(deep=True)
        events: List[ProgressionEvent] = []

        reward = roll_reward(base_xp, self.rng)
        xp_earned = base_xp + reward.bonus_xp
        if reward.granted:
            events.append(RewardGranted(kind=reward.kind.value, bonus_xp=reward.bonus_xp, area=area))
            record_reward(reward.kind.value)

        updated.activity_log.append(ActivityLogEntry(
            area=area,
            xp_earned=xp_earned,
            completed_at=now,
            notes=notes,
        ))

        self._add_area_xp(updated, area, xp_earned, events)
        self._add_profile_xp(updated, xp_earned, events)

        streak_update = record_activity(updated.streaks[area], today)
        streak = streak_update.streak
        if reward.kind == RewardKind.STREAK_FREEZE:
            streak = grant_freeze(streak)
        updated.streaks[area] = streak

        if streak_update.milestone:
            events.append(StreakMilestone(area=area, count=streak_update.milestone))

        record_xp("activity", area.value, base_xp)
        record_xp("bonus", area.value, reward.bonus_xp)

        logger.info(
            f"Activity logged for user {snapshot.user_id}: area={area.value}, "
            f"xp={xp_earned} (bonus {reward.bonus_xp}), reward={reward.kind.value}, "
            f"streak={streak.current_count}"
        )

        return ProgressionResult(
            snapshot=updated,
            events=events,
            xp_awarded=xp_earned,
            reward=reward,
            streak_update=streak_update,
        )

    def use_streak_freeze(
        self,
        snapshot: ProgressSnapshot,
        area: Union[LifeArea, str],
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        """
        Spend a freeze token on an area's streak.

        Returns:
            ProgressionResult whose ``freeze`` is the FreezeResult. A refused
            freeze (no token, streak not at risk, day already covered) comes
            back unchanged with changed=False.
        """
        area = self._resolve_area(area, snapshot.user_id, "use_streak_freeze")
        self._require_area_rows(snapshot, area, "use_streak_freeze")
        today = local_date(to_utc(now or now_utc()), self.tz_name)

        updated = snapshot.model_copy(deep=True)
        result = use_freeze(updated.streaks[area], today)
        record_freeze("used" if result.success else result.reason)

        if not result.success:
            logger.info(f"Freeze refused for user {snapshot.user_id} in {area.value}: {result.reason}")
            return ProgressionResult(snapshot=updated, freeze=result, changed=False)

        updated.streaks[area] = result.streak
        return ProgressionResult(snapshot=updated, freeze=result)

    def record_daily_login(
        self,
        snapshot: ProgressSnapshot,
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        """
        Record today's login and grant the login bonus once per day.

        Returns:
            ProgressionResult with ``login`` evaluation; a repeat login the same
            day returns bonus 0 and an unchanged snapshot.
        """
        today = local_date(to_utc(now or now_utc()), self.tz_name)

        evaluation = evaluate_daily_login(
            today,
            yesterday_record=snapshot.get_login(today - timedelta(days=1)),
            today_record=snapshot.get_login(today),
        )

        updated = snapshot.model_copy(deep=True)
        if evaluation.already_claimed_today:
            logger.debug(f"User {snapshot.user_id} already claimed login bonus for {today}")
            return ProgressionResult(snapshot=updated, login=evaluation, changed=False)

        events: List[ProgressionEvent] = []
        updated.daily_logins.append(evaluation.to_record(today))
        self._add_profile_xp(updated, evaluation.bonus_xp, events)
        record_xp("daily_login", CHARACTER_SCOPE, evaluation.bonus_xp)

        logger.info(
            f"Daily login for user {snapshot.user_id}: day {evaluation.consecutive_days}, "
            f"+{evaluation.bonus_xp} XP"
        )

        return ProgressionResult(
            snapshot=updated,
            events=events,
            xp_awarded=evaluation.bonus_xp,
            login=evaluation,
        )

    def accept_quest(
        self,
        snapshot: ProgressSnapshot,
        template_id: str,
        templates: Iterable[QuestTemplate],
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        """
        Instantiate a quest template for the user.

        Daily quests are due tomorrow, weekly quests in seven days.
        """
        template = next((t for t in templates if t.id == template_id), None)
        if template is None:
            raise RecordNotFoundError(
                f"Quest template {template_id} not found",
                record_type="QuestTemplate",
                record_id=template_id,
                user_id=snapshot.user_id,
                operation="accept_quest",
            )
        if not template.is_active:
            raise ValidationError(
                "Quest template is not active",
                field="template_id",
                value=template_id,
                user_id=snapshot.user_id,
                operation="accept_quest",
            )

        now = to_utc(now or now_utc())
        today = local_date(now, self.tz_name)

        open_titles = {q.title for q in snapshot.quests if not q.is_completed and not q.is_expired(today)}
        if template.title in open_titles:
            raise ValidationError(
                f"Quest '{template.title}' is already accepted",
                field="template_id",
                value=template_id,
                user_id=snapshot.user_id,
                operation="accept_quest",
            )

        quest = AcceptedQuest(
            template_id=template.id,
            title=template.title,
            description=template.description,
            area=template.area,
            xp_reward=template.xp_reward,
            quest_type=template.quest_type,
            created_at=now,
            due_date=today + QUEST_DURATION[template.quest_type],
        )

        updated = snapshot.model_copy(deep=True)
        updated.quests.append(quest)

        logger.info(
            f"User {snapshot.user_id} accepted {quest.quest_type.value} quest "
            f"'{quest.title}' due {quest.due_date}"
        )
        return ProgressionResult(snapshot=updated, quest=quest)

    def complete_quest(
        self,
        snapshot: ProgressSnapshot,
        quest_id: str,
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        """
        Complete an accepted quest and award its XP to the quest's area.

        Raises:
            RecordNotFoundError: unknown quest id
            ValidationError: quest already completed or expired
        """
        quest = snapshot.get_quest(quest_id)
        if quest is None:
            raise RecordNotFoundError(
                f"Quest {quest_id} not found",
                record_type="Quest",
                record_id=quest_id,
                user_id=snapshot.user_id,
                operation="complete_quest",
            )

        now = to_utc(now or now_utc())
        today = local_date(now, self.tz_name)

        if quest.is_completed:
            raise ValidationError(
                "Quest is already completed",
                field="quest_id",
                value=quest_id,
                user_id=snapshot.user_id,
                operation="complete_quest",
            )
        if quest.is_expired(today):
            raise ValidationError(
                f"Quest expired on {quest.due_date}",
                field="quest_id",
                value=quest_id,
                user_id=snapshot.user_id,
                operation="complete_quest",
            )
        self._require_area_rows(snapshot, quest.area, "complete_quest")

        updated = snapshot.model_copy(deep=True)
        completed = updated.get_quest(quest_id)
        completed.is_completed = True
        completed.completed_at = now

        events: List[ProgressionEvent] = [
            QuestCompleted(quest_id=quest_id, area=quest.area, xp_reward=quest.xp_reward)
        ]
        self._add_area_xp(updated, quest.area, quest.xp_reward, events)
        record_xp("quest", quest.area.value, quest.xp_reward)

        logger.info(
            f"User {snapshot.user_id} completed quest '{quest.title}' (+{quest.xp_reward} XP)"
        )

        return ProgressionResult(
            snapshot=updated,
            events=events,
            xp_awarded=quest.xp_reward,
            quest=completed,
        )

    def recommend_quests(
        self,
        snapshot: ProgressSnapshot,
        templates: Iterable[QuestTemplate],
        accepted_titles: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None
    ) -> List[QuestSuggestion]:
        """
        Rank quest templates for the user (read-only).

        When accepted_titles is not given, titles of quests accepted today are
        excluded.
        """
        today = local_date(to_utc(now or now_utc()), self.tz_name)

        if accepted_titles is None:
            accepted_titles = [
                q.title for q in snapshot.quests
                if local_date(q.created_at, self.tz_name) == today
            ]

        return recommend_quests(
            snapshot.areas,
            snapshot.streaks,
            templates,
            accepted_titles,
            today,
            top_n=self.recommendation_limit,
            weekly_target=self.weekly_target,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_area(self, area: Union[LifeArea, str], user_id: str, operation: str) -> LifeArea:
        try:
            return LifeArea(area)
        except ValueError:
            raise ValidationError(
                f"Unknown life area '{area}'",
                field="area",
                value=area,
                user_id=user_id,
                operation=operation,
            ) from None

    def _validate_activity_xp(self, base_xp: int, user_id: str) -> None:
        if isinstance(base_xp, bool) or not isinstance(base_xp, int):
            raise ValidationError(
                "XP must be a whole number",
                field="base_xp",
                value=base_xp,
                user_id=user_id,
                operation="log_activity",
            )
        if not self.min_activity_xp <= base_xp <= self.max_activity_xp:
            raise ValidationError(
                f"XP must be between {self.min_activity_xp} and {self.max_activity_xp}",
                field="base_xp",
                value=base_xp,
                user_id=user_id,
                operation="log_activity",
            )

    def _require_area_rows(self, snapshot: ProgressSnapshot, area: LifeArea, operation: str) -> None:
        if area not in snapshot.areas:
            raise RecordNotFoundError(
                f"No area progress for {area.value}",
                record_type="AreaProgress",
                record_id=f"{snapshot.user_id}:{area.value}",
                user_id=snapshot.user_id,
                operation=operation,
            )
        if area not in snapshot.streaks:
            raise RecordNotFoundError(
                f"No streak for {area.value}",
                record_type="Streak",
                record_id=f"{snapshot.user_id}:{area.value}",
                user_id=snapshot.user_id,
                operation=operation,
            )

    def _add_area_xp(
        self,
        snapshot: ProgressSnapshot,
        area: LifeArea,
        amount: int,
        events: List[ProgressionEvent]
    ) -> None:
        progress = snapshot.areas[area]
        result = apply_xp(progress.total_xp, amount, progress.level, self.level_xp_base)

        progress.total_xp = result["new_total_xp"]
        progress.weekly_xp += amount
        progress.level = result["new_level"]

        if result["leveled_up"]:
            events.append(LevelUp(scope=area.value, old_level=result["old_level"], new_level=result["new_level"]))
            record_level_up(area.value)
            logger.info(
                f"User {snapshot.user_id} {area.value} level "
                f"{result['old_level']} -> {result['new_level']}"
            )

    def _add_profile_xp(
        self,
        snapshot: ProgressSnapshot,
        amount: int,
        events: List[ProgressionEvent]
    ) -> None:
        profile = snapshot.profile
        result = apply_xp(profile.monthly_xp, amount, profile.character_level, self.level_xp_base)

        profile.total_xp += amount
        profile.monthly_xp = result["new_total_xp"]
        profile.character_level = result["new_level"]

        if result["leveled_up"]:
            events.append(LevelUp(
                scope=CHARACTER_SCOPE,
                old_level=result["old_level"],
                new_level=result["new_level"],
            ))
            record_level_up(CHARACTER_SCOPE)
            logger.info(
                f"User {snapshot.user_id} leveled up from {result['old_level']} "
                f"to {result['new_level']}!"
            )
