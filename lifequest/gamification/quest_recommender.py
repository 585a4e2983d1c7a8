"""
Smart Quest Recommendations

Ranks quest templates for a user by how much each life area needs
attention:

- Weekly deficit: max(0, target - weekly_xp) / 10
- Streak at risk: +5 when the area's streak has seen no activity for a day
  or more (this reason wins over the deficit reason)
- Difficulty bonus per template: easy +2, medium +1, hard +0

Templates whose title was already accepted this period are dropped, ties
keep catalog order, and only the top N come back.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional
from datetime import date
import logging

from lifequest import config
from lifequest.models import (
    AreaProgress,
    LifeArea,
    QuestDifficulty,
    QuestSuggestion,
    QuestTemplate,
    Streak,
)
from lifequest.gamification.streak_system import days_since_activity

logger = logging.getLogger(__name__)

STREAK_RISK_BONUS = 5
DEFICIT_DIVISOR = 10
DEFAULT_REASON = "Explore new area"

DIFFICULTY_BONUS = {
    QuestDifficulty.EASY: 2,
    QuestDifficulty.MEDIUM: 1,
    QuestDifficulty.HARD: 0,
}


@dataclass
class AreaScore:
    score: float
    reason: str


def score_area(
    progress: AreaProgress,
    streak: Optional[Streak],
    today: date,
    weekly_target: int = config.WEEKLY_XP_TARGET
) -> AreaScore:
    """Priority score and human-readable reason for one area"""
    score = 0.0
    reason = ""

    weekly_deficit = max(0, weekly_target - progress.weekly_xp)
    if weekly_deficit > 0:
        score += weekly_deficit / DEFICIT_DIVISOR
        reason = f"Need {weekly_deficit} more XP this week"

    if streak is not None:
        days_idle = days_since_activity(streak, today)
        if days_idle is not None and days_idle >= 1:
            score += STREAK_RISK_BONUS
            reason = f"{streak.current_count} day streak at risk!"

    if score == 0:
        return AreaScore(score=0.0, reason=DEFAULT_REASON)
    return AreaScore(score=score, reason=reason)


def score_areas(
    areas: Mapping[LifeArea, AreaProgress],
    streaks: Mapping[LifeArea, Streak],
    today: date,
    weekly_target: int = config.WEEKLY_XP_TARGET
) -> Dict[LifeArea, AreaScore]:
    return {
        area: score_area(progress, streaks.get(area), today, weekly_target)
        for area, progress in areas.items()
    }


def recommend_quests(
    areas: Mapping[LifeArea, AreaProgress],
    streaks: Mapping[LifeArea, Streak],
    templates: Iterable[QuestTemplate],
    accepted_titles: Iterable[str],
    today: date,
    top_n: int = config.RECOMMENDATION_LIMIT,
    weekly_target: int = config.WEEKLY_XP_TARGET
) -> List[QuestSuggestion]:
    """
    Rank quest templates for a user

    Args:
        areas: Area progress by life area
        streaks: Streaks by life area
        templates: Quest catalog, in catalog order
        accepted_titles: Titles already accepted this period (exact match)
        today: Reference day for streak risk
        top_n: Number of suggestions to return
        weekly_target: Weekly XP goal per area

    Returns:
        Suggestions ordered by descending priority
    """
    area_scores = score_areas(areas, streaks, today, weekly_target)
    excluded = set(accepted_titles)

    suggestions = []
    for template in templates:
        if not template.is_active or template.title in excluded:
            continue

        area_score = area_scores.get(template.area, AreaScore(score=0.0, reason=DEFAULT_REASON))
        suggestions.append(QuestSuggestion(
            template_id=template.id,
            title=template.title,
            description=template.description,
            area=template.area,
            xp_reward=template.xp_reward,
            difficulty=template.difficulty,
            quest_type=template.quest_type,
            reason=area_score.reason,
            priority=area_score.score + DIFFICULTY_BONUS[template.difficulty],
        ))

    # sorted() is stable, so equal priorities keep catalog order
    ranked = sorted(suggestions, key=lambda s: s.priority, reverse=True)[:top_n]

    logger.debug(
        f"Ranked {len(suggestions)} quest templates "
        f"({len(excluded)} titles excluded), returning {len(ranked)}"
    )
    return ranked
