"""
Observability package for the progression engine.

Provides Prometheus counters for XP, levels, rewards, streak freezes and
snapshot write conflicts.
"""

from lifequest.observability.metrics import (
    record_xp,
    record_level_up,
    record_reward,
    record_freeze,
    record_conflict,
    record_retry,
)

__all__ = [
    "record_xp",
    "record_level_up",
    "record_reward",
    "record_freeze",
    "record_conflict",
    "record_retry",
]
