"""Progress snapshot models"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime
from uuid import uuid4

from lifequest.models.area import LifeArea
from lifequest.models.quest import AcceptedQuest


class Profile(BaseModel):
    """Character-level totals; character_level follows monthly_xp"""
    user_id: str
    total_xp: int = Field(default=0, ge=0)
    monthly_xp: int = Field(default=0, ge=0)
    character_level: int = Field(default=1, ge=1)
    monthly_reset_date: Optional[date] = None


class AreaProgress(BaseModel):
    """Per-dimension totals; level follows total_xp"""
    area: LifeArea
    total_xp: int = Field(default=0, ge=0)
    weekly_xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    weekly_reset_date: Optional[date] = None


class Streak(BaseModel):
    """Consecutive-day counter for one dimension"""
    area: LifeArea
    current_count: int = Field(default=0, ge=0)
    longest_count: int = Field(default=0, ge=0)
    freeze_count: int = Field(default=0, ge=0)
    last_activity_date: Optional[date] = None
    last_freeze_date: Optional[date] = None


class ActivityLogEntry(BaseModel):
    """One completed activity (immutable)"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    area: LifeArea
    xp_earned: int
    completed_at: datetime
    notes: Optional[str] = None


class DailyLoginRecord(BaseModel):
    """One per user per calendar day"""
    login_date: date
    consecutive_days: int = Field(ge=1)
    bonus_claimed: bool = True


class ProgressSnapshot(BaseModel):
    """Everything the engine needs for one user, passed by value"""
    user_id: str
    profile: Profile
    areas: dict[LifeArea, AreaProgress] = Field(default_factory=dict)
    streaks: dict[LifeArea, Streak] = Field(default_factory=dict)
    activity_log: list[ActivityLogEntry] = Field(default_factory=list)
    quests: list[AcceptedQuest] = Field(default_factory=list)
    daily_logins: list[DailyLoginRecord] = Field(default_factory=list)
    version: int = 0

    @classmethod
    def new(cls, user_id: str) -> "ProgressSnapshot":
        """Provision a fresh snapshot with one AreaProgress and Streak per area"""
        return cls(
            user_id=user_id,
            profile=Profile(user_id=user_id),
            areas={area: AreaProgress(area=area) for area in LifeArea},
            streaks={area: Streak(area=area) for area in LifeArea},
        )

    def get_login(self, login_date: date) -> Optional[DailyLoginRecord]:
        for record in self.daily_logins:
            if record.login_date == login_date:
                return record
        return None

    def get_quest(self, quest_id: str) -> Optional[AcceptedQuest]:
        for quest in self.quests:
            if quest.id == quest_id:
                return quest
        return None
