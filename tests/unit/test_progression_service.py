"""Unit tests for ProgressionService"""

import pytest
from datetime import date, datetime, timedelta, timezone

from lifequest.exceptions import RecordNotFoundError, ValidationError
from lifequest.gamification.rewards import RewardKind
from lifequest.models import (
    DailyLoginRecord,
    LevelUp,
    LifeArea,
    QuestCompleted,
    QuestType,
    RewardGranted,
    StreakMilestone,
)
from lifequest.services.progression_service import ProgressionService


def service_with_draws(scripted_rng, *draws):
    return ProgressionService(level_xp_base=100, rng=scripted_rng(*draws), tz_name="UTC")


# ============================================================================
# Log Activity Tests
# ============================================================================

def test_log_activity_end_to_end_level_up(service, snapshot, now):
    """Test 95 XP + 10 XP with no bonus reaches level 2"""
    snapshot.profile.total_xp = 95
    snapshot.profile.monthly_xp = 95
    snapshot.areas[LifeArea.PHYSICAL].total_xp = 95

    result = service.log_activity(snapshot, LifeArea.PHYSICAL, 10, now=now)

    profile = result.snapshot.profile
    assert profile.total_xp == 105
    assert profile.monthly_xp == 105
    assert profile.character_level == 2
    assert result.snapshot.areas[LifeArea.PHYSICAL].level == 2
    assert result.reward.kind == RewardKind.NONE

    level_ups = result.level_ups
    assert {e.scope for e in level_ups} == {"character", "physical"}
    assert all(e.new_level == 2 for e in level_ups)


def test_log_activity_updates_area_and_log(service, snapshot, now):
    """Test XP, weekly XP, streak and the activity log entry"""
    result = service.log_activity(snapshot, "mental", 15, notes="Read a chapter", now=now)

    area = result.snapshot.areas[LifeArea.MENTAL]
    assert area.total_xp == 15
    assert area.weekly_xp == 15
    assert area.level == 1

    streak = result.snapshot.streaks[LifeArea.MENTAL]
    assert streak.current_count == 1
    assert streak.last_activity_date == now.date()

    entry = result.snapshot.activity_log[-1]
    assert entry.area == LifeArea.MENTAL
    assert entry.xp_earned == 15
    assert entry.notes == "Read a chapter"
    assert result.xp_awarded == 15
    assert result.events == []


def test_log_activity_does_not_mutate_input(service, snapshot, now):
    """Test the input snapshot is passed by value"""
    service.log_activity(snapshot, LifeArea.PHYSICAL, 10, now=now)

    assert snapshot.profile.total_xp == 0
    assert snapshot.activity_log == []
    assert snapshot.streaks[LifeArea.PHYSICAL].current_count == 0


def test_log_activity_bonus_xp_reward(scripted_rng, snapshot, now):
    """Test bonus XP is added on top of base XP"""
    service = service_with_draws(scripted_rng, 0.05, 0.0)

    result = service.log_activity(snapshot, LifeArea.PHYSICAL, 20, now=now)

    assert result.reward.kind == RewardKind.BONUS_XP
    assert result.xp_awarded == 30
    assert result.snapshot.profile.total_xp == 30
    assert result.snapshot.activity_log[-1].xp_earned == 30
    reward_events = [e for e in result.events if isinstance(e, RewardGranted)]
    assert reward_events == [RewardGranted(kind="bonus_xp", bonus_xp=10, area=LifeArea.PHYSICAL)]


def test_log_activity_streak_freeze_reward(scripted_rng, snapshot, now):
    """Test a streak freeze reward adds a token to the logged area"""
    service = service_with_draws(scripted_rng, 0.12)

    result = service.log_activity(snapshot, LifeArea.SOCIAL, 10, now=now)

    assert result.reward.kind == RewardKind.STREAK_FREEZE
    assert result.xp_awarded == 10
    assert result.snapshot.streaks[LifeArea.SOCIAL].freeze_count == 1
    assert result.snapshot.streaks[LifeArea.PHYSICAL].freeze_count == 0


def test_log_activity_rare_badge_reward(scripted_rng, snapshot, now):
    service = service_with_draws(scripted_rng, 0.155)

    result = service.log_activity(snapshot, LifeArea.SOCIAL, 10, now=now)

    assert result.reward.kind == RewardKind.RARE_BADGE
    assert RewardGranted(kind="rare_badge", bonus_xp=0, area=LifeArea.SOCIAL) in result.events


def test_log_activity_twice_same_day_counts_streak_once(service, snapshot, now):
    """Test the same day's second activity adds XP but not streak days"""
    first = service.log_activity(snapshot, LifeArea.PHYSICAL, 10, now=now)
    second = service.log_activity(first.snapshot, LifeArea.PHYSICAL, 10, now=now + timedelta(hours=2))

    assert second.snapshot.streaks[LifeArea.PHYSICAL].current_count == 1
    assert second.snapshot.areas[LifeArea.PHYSICAL].total_xp == 20
    assert second.streak_update.counted is False


def test_log_activity_streak_milestone(service, snapshot, now):
    """Test day seven of a streak emits a milestone event"""
    streak = snapshot.streaks[LifeArea.PHYSICAL]
    streak.current_count = 6
    streak.longest_count = 6
    streak.last_activity_date = now.date() - timedelta(days=1)

    result = service.log_activity(snapshot, LifeArea.PHYSICAL, 10, now=now)

    assert StreakMilestone(area=LifeArea.PHYSICAL, count=7) in result.events


@pytest.mark.parametrize("xp", [0, -5, 51, 1000])
def test_log_activity_rejects_out_of_range_xp(service, snapshot, now, xp):
    """Test non-positive or too-large XP is a validation error"""
    with pytest.raises(ValidationError) as exc_info:
        service.log_activity(snapshot, LifeArea.PHYSICAL, xp, now=now)

    assert exc_info.value.field == "base_xp"


def test_log_activity_rejects_non_integer_xp(service, snapshot, now):
    with pytest.raises(ValidationError):
        service.log_activity(snapshot, LifeArea.PHYSICAL, 10.5, now=now)


def test_log_activity_rejects_unknown_area(service, snapshot, now):
    with pytest.raises(ValidationError) as exc_info:
        service.log_activity(snapshot, "underwater", 10, now=now)

    assert exc_info.value.field == "area"


def test_log_activity_missing_area_row(service, snapshot, now):
    """Test missing provisioning is a data-integrity error"""
    del snapshot.areas[LifeArea.FINANCIAL]

    with pytest.raises(RecordNotFoundError) as exc_info:
        service.log_activity(snapshot, LifeArea.FINANCIAL, 10, now=now)

    assert exc_info.value.record_type == "AreaProgress"


def test_log_activity_missing_streak_row(service, snapshot, now):
    del snapshot.streaks[LifeArea.FINANCIAL]

    with pytest.raises(RecordNotFoundError) as exc_info:
        service.log_activity(snapshot, LifeArea.FINANCIAL, 10, now=now)

    assert exc_info.value.record_type == "Streak"


def test_log_activity_calendar_day_uses_timezone(snapshot, scripted_rng):
    """Test late-evening UTC activity counts on the next local day east of UTC"""
    service = ProgressionService(rng=scripted_rng(0.99), tz_name="Asia/Tokyo")
    late = datetime(2024, 1, 17, 20, 0, tzinfo=timezone.utc)

    result = service.log_activity(snapshot, LifeArea.PHYSICAL, 10, now=late)

    assert result.snapshot.streaks[LifeArea.PHYSICAL].last_activity_date == date(2024, 1, 18)


# ============================================================================
# Streak Freeze Tests
# ============================================================================

def test_use_streak_freeze_bridges_gap(service, snapshot, now):
    """Test d, freeze on d+1, activity on d+2 continues the streak"""
    snapshot.streaks[LifeArea.MENTAL].freeze_count = 1

    day1 = service.log_activity(snapshot, LifeArea.MENTAL, 10, now=now)
    frozen = service.use_streak_freeze(day1.snapshot, LifeArea.MENTAL, now=now + timedelta(days=1))
    day3 = service.log_activity(frozen.snapshot, LifeArea.MENTAL, 10, now=now + timedelta(days=2))

    assert frozen.freeze.success is True
    assert frozen.snapshot.streaks[LifeArea.MENTAL].current_count == 1
    assert day3.snapshot.streaks[LifeArea.MENTAL].current_count == 2
    assert day3.snapshot.streaks[LifeArea.MENTAL].freeze_count == 0


def test_use_streak_freeze_none_available(service, snapshot, now):
    """Test NoFreezeAvailable leaves the snapshot unchanged"""
    result = service.use_streak_freeze(snapshot, LifeArea.MENTAL, now=now)

    assert result.freeze.success is False
    assert result.freeze.no_freeze_available is True
    assert result.snapshot == snapshot
    assert result.changed is False


def test_use_streak_freeze_after_gap_refused(service, snapshot, now):
    """Test a freeze days after the last activity keeps the token and the break"""
    streak = snapshot.streaks[LifeArea.MENTAL]
    streak.current_count = 10
    streak.longest_count = 10
    streak.freeze_count = 1
    streak.last_activity_date = now.date() - timedelta(days=5)

    frozen = service.use_streak_freeze(snapshot, LifeArea.MENTAL, now=now)
    logged = service.log_activity(frozen.snapshot, LifeArea.MENTAL, 10, now=now + timedelta(days=1))

    assert frozen.freeze.success is False
    assert frozen.changed is False
    assert frozen.snapshot.streaks[LifeArea.MENTAL].freeze_count == 1
    assert logged.snapshot.streaks[LifeArea.MENTAL].current_count == 1


# ============================================================================
# Daily Login Tests
# ============================================================================

def test_record_daily_login_first_day(service, snapshot, now):
    result = service.record_daily_login(snapshot, now=now)

    assert result.login.consecutive_days == 1
    assert result.login.bonus_xp == 5
    assert result.snapshot.profile.total_xp == 5
    assert result.snapshot.profile.monthly_xp == 5
    assert result.snapshot.get_login(now.date()).consecutive_days == 1


def test_record_daily_login_idempotent(service, snapshot, now):
    """Test a second login the same day grants nothing"""
    first = service.record_daily_login(snapshot, now=now)
    second = service.record_daily_login(first.snapshot, now=now + timedelta(hours=3))

    assert second.login.bonus_xp == 0
    assert second.login.already_claimed_today is True
    assert second.changed is False
    assert second.login.consecutive_days == 1
    assert second.snapshot.profile.total_xp == 5
    assert len(second.snapshot.daily_logins) == 1


def test_record_daily_login_seventh_day(service, snapshot, now):
    """Test day seven pays the 50 XP tier"""
    snapshot.daily_logins.append(
        DailyLoginRecord(login_date=now.date() - timedelta(days=1), consecutive_days=6)
    )

    result = service.record_daily_login(snapshot, now=now)

    assert result.login.consecutive_days == 7
    assert result.xp_awarded == 50


def test_record_daily_login_can_level_up(service, snapshot, now):
    snapshot.profile.monthly_xp = 98
    snapshot.profile.total_xp = 98

    result = service.record_daily_login(snapshot, now=now)

    assert result.snapshot.profile.character_level == 2
    assert LevelUp(scope="character", old_level=1, new_level=2) in result.events


# ============================================================================
# Quest Tests
# ============================================================================

def test_accept_daily_quest(service, snapshot, now, quest_templates):
    """Test daily quests are due the next day"""
    result = service.accept_quest(snapshot, "t-run", quest_templates, now=now)

    quest = result.quest
    assert quest.title == "Go for a run"
    assert quest.due_date == now.date() + timedelta(days=1)
    assert quest.is_completed is False
    assert result.snapshot.quests == [quest]


def test_accept_weekly_quest(service, snapshot, now, quest_templates):
    """Test weekly quests are due in seven days"""
    result = service.accept_quest(snapshot, "t-marathon", quest_templates, now=now)

    assert result.quest.quest_type == QuestType.WEEKLY
    assert result.quest.due_date == now.date() + timedelta(days=7)


def test_accept_quest_unknown_template(service, snapshot, now, quest_templates):
    with pytest.raises(RecordNotFoundError):
        service.accept_quest(snapshot, "missing", quest_templates, now=now)


def test_accept_quest_twice_rejected(service, snapshot, now, quest_templates):
    """Test the same quest cannot be open twice"""
    first = service.accept_quest(snapshot, "t-run", quest_templates, now=now)

    with pytest.raises(ValidationError):
        service.accept_quest(first.snapshot, "t-run", quest_templates, now=now)


def test_accept_inactive_template_rejected(service, snapshot, now, quest_templates):
    inactive = [t.model_copy(update={"is_active": False}) for t in quest_templates]

    with pytest.raises(ValidationError):
        service.accept_quest(snapshot, "t-run", inactive, now=now)


def test_complete_quest_awards_area_xp(service, snapshot, now, quest_templates):
    """Test quest XP goes to the quest's area"""
    accepted = service.accept_quest(snapshot, "t-run", quest_templates, now=now)
    quest_id = accepted.quest.id

    result = service.complete_quest(accepted.snapshot, quest_id, now=now + timedelta(hours=1))

    area = result.snapshot.areas[LifeArea.PHYSICAL]
    assert area.total_xp == 20
    assert area.weekly_xp == 20
    assert result.snapshot.get_quest(quest_id).is_completed is True
    assert result.snapshot.get_quest(quest_id).completed_at is not None
    assert QuestCompleted(quest_id=quest_id, area=LifeArea.PHYSICAL, xp_reward=20) in result.events
    assert result.snapshot.profile.total_xp == 0


def test_complete_quest_level_up(service, snapshot, now, quest_templates):
    snapshot.areas[LifeArea.PHYSICAL].total_xp = 90
    accepted = service.accept_quest(snapshot, "t-run", quest_templates, now=now)

    result = service.complete_quest(accepted.snapshot, accepted.quest.id, now=now)

    assert result.snapshot.areas[LifeArea.PHYSICAL].level == 2
    assert LevelUp(scope="physical", old_level=1, new_level=2) in result.events


def test_complete_quest_twice_rejected(service, snapshot, now, quest_templates):
    accepted = service.accept_quest(snapshot, "t-run", quest_templates, now=now)
    done = service.complete_quest(accepted.snapshot, accepted.quest.id, now=now)

    with pytest.raises(ValidationError):
        service.complete_quest(done.snapshot, accepted.quest.id, now=now)


def test_complete_expired_quest_rejected(service, snapshot, now, quest_templates):
    """Test quests cannot be completed after their due date"""
    accepted = service.accept_quest(snapshot, "t-run", quest_templates, now=now)

    with pytest.raises(ValidationError):
        service.complete_quest(accepted.snapshot, accepted.quest.id, now=now + timedelta(days=2))


def test_complete_unknown_quest(service, snapshot, now):
    with pytest.raises(RecordNotFoundError):
        service.complete_quest(snapshot, "nope", now=now)


# ============================================================================
# Recommendation Tests
# ============================================================================

def test_recommend_quests_excludes_todays_accepted(service, snapshot, now, quest_templates):
    """Test quests accepted today are excluded when no titles are passed"""
    accepted = service.accept_quest(snapshot, "t-read", quest_templates, now=now)

    suggestions = service.recommend_quests(accepted.snapshot, quest_templates, now=now)

    assert "Read 20 pages" not in [s.title for s in suggestions]
    assert len(suggestions) == 5


def test_recommend_quests_explicit_titles(service, snapshot, now, quest_templates):
    suggestions = service.recommend_quests(
        snapshot, quest_templates, accepted_titles=["Go for a run", "Call a friend"], now=now
    )

    titles = [s.title for s in suggestions]
    assert "Go for a run" not in titles
    assert "Call a friend" not in titles


def test_recommend_quests_prefers_easy_on_fresh_account(service, snapshot, now, quest_templates):
    """Test equal area scores let the difficulty bonus decide"""
    suggestions = service.recommend_quests(snapshot, quest_templates, accepted_titles=[], now=now)

    # Every area has a 6.0 deficit score; easy +2 ranks first in catalog order
    assert [s.title for s in suggestions[:3]] == ["Read 20 pages", "Call a friend", "Meditate 10 minutes"]
    assert suggestions[0].priority == pytest.approx(8.0)
