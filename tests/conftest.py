"""Global test fixtures and utilities for lifequest tests"""
import pytest
from datetime import date, datetime, timezone

from lifequest.db.snapshot_store import InMemorySnapshotStore
from lifequest.models import (
    LifeArea,
    ProgressSnapshot,
    QuestDifficulty,
    QuestTemplate,
    QuestType,
)
from lifequest.services.progression_service import ProgressionService


class ScriptedRandom:
    """Random source that replays fixed draws (last value repeats)"""

    def __init__(self, *values: float):
        self.values = list(values) or [0.99]
        self.calls = 0

    def random(self) -> float:
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def today():
    """Fixed calendar day (a Wednesday)"""
    return date(2024, 1, 17)


@pytest.fixture
def now(today):
    """Midday UTC on the fixed day"""
    return datetime(today.year, today.month, today.day, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Snapshot Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def snapshot(test_user_id):
    """Freshly provisioned snapshot"""
    return ProgressSnapshot.new(test_user_id)


# ============================================================================
# Randomness Fixtures
# ============================================================================

@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRandom instances"""
    return ScriptedRandom


@pytest.fixture
def no_reward_rng():
    """Random source whose draws never hit a reward band"""
    return ScriptedRandom(0.99)


@pytest.fixture
def service(no_reward_rng):
    """ProgressionService with default rules and no variable rewards"""
    return ProgressionService(
        level_xp_base=100,
        weekly_target=60,
        recommendation_limit=5,
        min_activity_xp=1,
        max_activity_xp=50,
        rng=no_reward_rng,
        tz_name="UTC",
    )


# ============================================================================
# Quest Fixtures
# ============================================================================

@pytest.fixture
def quest_templates():
    """Small quest catalog in catalog order"""
    return [
        QuestTemplate(id="t-run", title="Go for a run", area=LifeArea.PHYSICAL,
                      xp_reward=20, difficulty=QuestDifficulty.MEDIUM),
        QuestTemplate(id="t-read", title="Read 20 pages", area=LifeArea.MENTAL,
                      xp_reward=15, difficulty=QuestDifficulty.EASY),
        QuestTemplate(id="t-budget", title="Review budget", area=LifeArea.FINANCIAL,
                      xp_reward=25, difficulty=QuestDifficulty.HARD),
        QuestTemplate(id="t-call", title="Call a friend", area=LifeArea.SOCIAL,
                      xp_reward=10, difficulty=QuestDifficulty.EASY),
        QuestTemplate(id="t-meditate", title="Meditate 10 minutes", area=LifeArea.SPIRITUAL,
                      xp_reward=10, difficulty=QuestDifficulty.EASY),
        QuestTemplate(id="t-inbox", title="Inbox zero", area=LifeArea.PRODUCTIVITY,
                      xp_reward=15, difficulty=QuestDifficulty.MEDIUM),
        QuestTemplate(id="t-marathon", title="Train for a half marathon", area=LifeArea.PHYSICAL,
                      xp_reward=100, difficulty=QuestDifficulty.HARD, quest_type=QuestType.WEEKLY),
    ]


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Empty in-memory snapshot store"""
    return InMemorySnapshotStore()
