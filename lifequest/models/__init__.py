"""Pydantic models for the progression engine"""

from lifequest.models.area import LifeArea
from lifequest.models.quest import (
    QuestDifficulty,
    QuestType,
    QuestTemplate,
    AcceptedQuest,
    QuestSuggestion,
)
from lifequest.models.progress import (
    Profile,
    AreaProgress,
    Streak,
    ActivityLogEntry,
    DailyLoginRecord,
    ProgressSnapshot,
)
from lifequest.models.events import (
    LevelUp,
    RewardGranted,
    StreakMilestone,
    QuestCompleted,
    ProgressionEvent,
)

__all__ = [
    "LifeArea",
    "QuestDifficulty",
    "QuestType",
    "QuestTemplate",
    "AcceptedQuest",
    "QuestSuggestion",
    "Profile",
    "AreaProgress",
    "Streak",
    "ActivityLogEntry",
    "DailyLoginRecord",
    "ProgressSnapshot",
    "LevelUp",
    "RewardGranted",
    "StreakMilestone",
    "QuestCompleted",
    "ProgressionEvent",
]
