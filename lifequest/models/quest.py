"""Quest catalog and accepted quest models"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import uuid4

from lifequest.models.area import LifeArea


class QuestDifficulty(str, Enum):
    """Template difficulty; easier quests get a larger recommendation bonus"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestType(str, Enum):
    """How long an accepted quest stays open"""
    DAILY = "daily"
    WEEKLY = "weekly"


class QuestTemplate(BaseModel):
    """Static catalog entry (read-only to the engine)"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    description: str = ""
    area: LifeArea
    xp_reward: int = Field(gt=0)
    difficulty: QuestDifficulty = QuestDifficulty.MEDIUM
    quest_type: QuestType = QuestType.DAILY
    is_active: bool = True


class AcceptedQuest(BaseModel):
    """A template instantiated for a user"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    template_id: Optional[str] = None
    title: str
    description: str = ""
    area: LifeArea
    xp_reward: int = Field(gt=0)
    quest_type: QuestType = QuestType.DAILY
    created_at: datetime
    due_date: date
    is_completed: bool = False
    completed_at: Optional[datetime] = None

    def is_expired(self, today: date) -> bool:
        return not self.is_completed and today > self.due_date


class QuestSuggestion(BaseModel):
    """Ranked recommendation produced from a template"""
    template_id: str
    title: str
    description: str = ""
    area: LifeArea
    xp_reward: int
    difficulty: QuestDifficulty
    quest_type: QuestType
    reason: str
    priority: float
