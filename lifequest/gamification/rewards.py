"""
Variable Reward System

One uniform draw r in [0, 1) per logged activity, checked against
cumulative bands so at most one reward fires:

- r < 0.10           bonus XP (1.5x-2.0x of base XP)
- 0.10 <= r < 0.15   streak freeze token
- 0.15 <= r < 0.16   rare badge
- otherwise          nothing

The random source is always passed in (or taken from this module's own
Random instance) so tests can pin the draw.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol
import math
import random
import logging

logger = logging.getLogger(__name__)

BONUS_XP_BAND = 0.10
STREAK_FREEZE_BAND = 0.15
RARE_BADGE_BAND = 0.16

BONUS_MULTIPLIER_MIN = 1.5
BONUS_MULTIPLIER_MAX = 2.0

_default_rng = random.Random()


class RandomSource(Protocol):
    def random(self) -> float: ...


class RewardKind(str, Enum):
    BONUS_XP = "bonus_xp"
    STREAK_FREEZE = "streak_freeze"
    RARE_BADGE = "rare_badge"
    NONE = "none"


@dataclass(frozen=True)
class RewardOutcome:
    kind: RewardKind
    bonus_xp: int = 0

    @property
    def granted(self) -> bool:
        return self.kind != RewardKind.NONE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_draw(r: float) -> RewardKind:
    """Map a draw in [0, 1) to its reward band"""
    if r < BONUS_XP_BAND:
        return RewardKind.BONUS_XP
    if r < STREAK_FREEZE_BAND:
        return RewardKind.STREAK_FREEZE
    if r < RARE_BADGE_BAND:
        return RewardKind.RARE_BADGE
    return RewardKind.NONE


def roll_reward(base_xp: int, rng: Optional[RandomSource] = None) -> RewardOutcome:
    """
    Roll the variable reward for an activity

    Args:
        base_xp: XP of the logged activity
        rng: Object with a random() method returning floats in [0, 1)

    Returns:
        RewardOutcome with kind and bonus_xp (non-zero only for bonus_xp)
    """
    rng = rng or _default_rng
    kind = classify_draw(rng.random())

    if kind == RewardKind.BONUS_XP:
        multiplier = BONUS_MULTIPLIER_MIN + rng.random() * (BONUS_MULTIPLIER_MAX - BONUS_MULTIPLIER_MIN)
        bonus_xp = _round_half_up(base_xp * multiplier) - base_xp
        logger.debug(f"Bonus XP roll: {base_xp} XP x{multiplier:.2f} -> +{bonus_xp}")
        return RewardOutcome(kind=kind, bonus_xp=bonus_xp)

    if kind != RewardKind.NONE:
        logger.debug(f"Reward roll: {kind.value}")
    return RewardOutcome(kind=kind)
