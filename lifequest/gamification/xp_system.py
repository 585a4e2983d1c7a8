"""
XP and Leveling System

Turns cumulative XP into levels for the character profile (driven by
monthly XP) and for each life area (driven by area total XP).

Leveling Curve:
- Completing level n takes LEVEL_XP_BASE * n XP, measured against the
  cumulative total: level = floor(xp / (base * current_level)) + 1
- The threshold used is the one of the level the user currently holds, so
  every further level needs proportionally more XP than the last
- Levels never go down, and the minimum level is 1

Example (base 100):
- Level 1 -> 2 at 100 XP
- Level 2 -> 3 at 400 XP
- Level 3 -> 4 at 900 XP
"""

from typing import Any, Dict
import logging

from lifequest import config

logger = logging.getLogger(__name__)


def level_threshold(level: int, level_xp_base: int = config.LEVEL_XP_BASE) -> int:
    """XP divisor used while a user holds ``level``"""
    return level_xp_base * level


def compute_level(
    cumulative_xp: int,
    level_xp_base: int = config.LEVEL_XP_BASE,
    current_level: int = 1
) -> int:
    """
    Calculate level from cumulative XP

    Args:
        cumulative_xp: Total XP counted toward this level (non-negative)
        level_xp_base: XP per level step
        current_level: Level held before this XP change

    Returns:
        New level, never lower than current_level and never lower than 1
    """
    current_level = max(1, current_level)
    candidate = cumulative_xp // level_threshold(current_level, level_xp_base) + 1
    return max(current_level, candidate)


def xp_for_next_level(level: int, level_xp_base: int = config.LEVEL_XP_BASE) -> int:
    """Cumulative XP at which a user holding ``level`` advances"""
    return level_threshold(level, level_xp_base) * level


def calculate_level_progress(
    cumulative_xp: int,
    current_level: int,
    level_xp_base: int = config.LEVEL_XP_BASE
) -> Dict[str, Any]:
    """
    Describe progress toward the next level

    Returns:
        {
            'current_level': int,
            'next_level_at': int (cumulative XP),
            'xp_to_next_level': int,
            'progress_percent': float (0-100)
        }
    """
    level = compute_level(cumulative_xp, level_xp_base, current_level)
    next_level_at = xp_for_next_level(level, level_xp_base)
    previous_level_at = xp_for_next_level(level - 1, level_xp_base) if level > 1 else 0

    span = next_level_at - previous_level_at
    earned = min(max(cumulative_xp - previous_level_at, 0), span)

    return {
        "current_level": level,
        "next_level_at": next_level_at,
        "xp_to_next_level": max(next_level_at - cumulative_xp, 0),
        "progress_percent": round(earned / span * 100, 1) if span else 0.0,
    }


def apply_xp(
    cumulative_xp: int,
    amount: int,
    current_level: int,
    level_xp_base: int = config.LEVEL_XP_BASE
) -> Dict[str, Any]:
    """
    Add XP to a running total and recompute the level

    Returns:
        {
            'new_total_xp': int,
            'old_level': int,
            'new_level': int,
            'leveled_up': bool
        }
    """
    new_total_xp = cumulative_xp + amount
    new_level = compute_level(new_total_xp, level_xp_base, current_level)
    leveled_up = new_level > current_level

    if leveled_up:
        logger.debug(f"Level {current_level} -> {new_level} at {new_total_xp} XP")

    return {
        "new_total_xp": new_total_xp,
        "old_level": current_level,
        "new_level": new_level,
        "leveled_up": leveled_up,
    }
