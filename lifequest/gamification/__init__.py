"""
Gamification system for LifeQuest

Pure progression rules:
- XP and leveling
- Per-area streak tracking with freeze tokens
- Variable rewards
- Smart quest recommendations
- Daily login bonus
- Scheduled resets and quest generation
"""

from lifequest.gamification.xp_system import compute_level, calculate_level_progress
from lifequest.gamification.streak_system import record_activity, use_freeze, get_streak_state, is_at_risk
from lifequest.gamification.rewards import roll_reward, RewardKind, RewardOutcome
from lifequest.gamification.quest_recommender import recommend_quests
from lifequest.gamification.daily_login import evaluate_daily_login

__all__ = [
    "compute_level",
    "calculate_level_progress",
    "record_activity",
    "use_freeze",
    "get_streak_state",
    "is_at_risk",
    "roll_reward",
    "RewardKind",
    "RewardOutcome",
    "recommend_quests",
    "evaluate_daily_login",
]
