"""Unit tests for XP and Leveling System (lifequest/gamification/xp_system.py)"""
import pytest

from lifequest.gamification.xp_system import (
    apply_xp,
    calculate_level_progress,
    compute_level,
    level_threshold,
    xp_for_next_level,
)


# ============================================================================
# Level Calculation Tests
# ============================================================================

def test_compute_level_zero_xp():
    """Test zero XP is level 1, never level 0"""
    assert compute_level(0, 100) == 1
    assert compute_level(0, 100, current_level=1) == 1


def test_compute_level_from_level_one():
    """Test level 1 uses a 100 XP threshold"""
    assert compute_level(99, 100) == 1
    assert compute_level(100, 100) == 2
    assert compute_level(105, 100) == 2
    assert compute_level(250, 100) == 3


def test_compute_level_uses_current_level_threshold():
    """Test the held level's threshold (base * level) is the divisor"""
    # Level 2: threshold 200, advance once cumulative XP reaches 400
    assert compute_level(399, 100, current_level=2) == 2
    assert compute_level(400, 100, current_level=2) == 3
    # Level 3: threshold 300, advance at 900
    assert compute_level(899, 100, current_level=3) == 3
    assert compute_level(900, 100, current_level=3) == 4


def test_compute_level_never_drops_below_current():
    """Test recomputing with a larger threshold cannot lower the level"""
    # floor(105 / 200) + 1 == 1, but the user already holds level 2
    assert compute_level(105, 100, current_level=2) == 2
    assert compute_level(0, 100, current_level=5) == 5


def test_compute_level_custom_base():
    """Test a different XP base scales thresholds"""
    assert compute_level(49, 50) == 1
    assert compute_level(50, 50) == 2


def test_compute_level_monotonic_over_sequence():
    """Test non-decreasing XP never produces a lower level"""
    level = 1
    for xp in range(0, 5000, 7):
        new_level = compute_level(xp, 100, current_level=level)
        assert new_level >= level
        level = new_level


def test_compute_level_stateless_monotonic():
    """Test the from-scratch form is monotonic too"""
    levels = [compute_level(xp, 100) for xp in range(0, 2000, 13)]
    assert levels == sorted(levels)


def test_level_threshold_and_next_level():
    """Test threshold helpers"""
    assert level_threshold(1, 100) == 100
    assert level_threshold(4, 100) == 400
    assert xp_for_next_level(1, 100) == 100
    assert xp_for_next_level(2, 100) == 400
    assert xp_for_next_level(3, 100) == 900


# ============================================================================
# Level Progress Tests
# ============================================================================

def test_calculate_level_progress_level_one():
    """Test progress halfway through level 1"""
    result = calculate_level_progress(50, 1, 100)

    assert result["current_level"] == 1
    assert result["next_level_at"] == 100
    assert result["xp_to_next_level"] == 50
    assert result["progress_percent"] == 50.0


def test_calculate_level_progress_level_two():
    """Test progress inside level 2 (100 -> 400)"""
    result = calculate_level_progress(250, 2, 100)

    assert result["current_level"] == 2
    assert result["next_level_at"] == 400
    assert result["xp_to_next_level"] == 150
    assert result["progress_percent"] == 50.0


# ============================================================================
# Apply XP Tests
# ============================================================================

def test_apply_xp_level_up():
    """Test crossing a threshold reports the level-up"""
    result = apply_xp(95, 10, current_level=1, level_xp_base=100)

    assert result["new_total_xp"] == 105
    assert result["old_level"] == 1
    assert result["new_level"] == 2
    assert result["leveled_up"] is True


def test_apply_xp_no_level_up():
    """Test staying inside the current level"""
    result = apply_xp(10, 10, current_level=1, level_xp_base=100)

    assert result["new_total_xp"] == 20
    assert result["leveled_up"] is False
    assert result["new_level"] == 1


@pytest.mark.parametrize("total,level,expected", [
    (0, 1, 1),
    (350, 1, 4),  # floor(350 / 100) + 1: several levels at once
    (400, 2, 3),
])
def test_apply_xp_jumps(total, level, expected):
    """Test level after adding XP from different starting points"""
    assert apply_xp(total, 0, current_level=level, level_xp_base=100)["new_level"] == expected
