"""Domain events emitted by the progression engine"""
from pydantic import BaseModel
from typing import Literal, Optional, Union

from lifequest.models.area import LifeArea


class LevelUp(BaseModel):
    """Character or area level increased. scope is 'character' or an area value"""
    event_type: Literal["level_up"] = "level_up"
    scope: str
    old_level: int
    new_level: int


class RewardGranted(BaseModel):
    """Variable reward rolled on an activity"""
    event_type: Literal["reward_granted"] = "reward_granted"
    kind: str
    bonus_xp: int = 0
    area: Optional[LifeArea] = None


class StreakMilestone(BaseModel):
    """A streak landed on a milestone count"""
    event_type: Literal["streak_milestone"] = "streak_milestone"
    area: LifeArea
    count: int


class QuestCompleted(BaseModel):
    event_type: Literal["quest_completed"] = "quest_completed"
    quest_id: str
    area: LifeArea
    xp_reward: int


ProgressionEvent = Union[LevelUp, RewardGranted, StreakMilestone, QuestCompleted]
