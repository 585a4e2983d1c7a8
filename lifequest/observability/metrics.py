"""
Prometheus metrics definitions for the progression engine.

Metrics are grouped by category:
- XP metrics: XP awarded by source and area
- Level metrics: Level-ups by scope
- Reward metrics: Variable rewards by kind
- Streak metrics: Freeze tokens used or refused
- Storage metrics: Snapshot write conflicts and retries

The host application exposes the default registry for scraping.
"""

import logging
from prometheus_client import Counter

logger = logging.getLogger(__name__)

# =============================================================================
# XP Metrics
# =============================================================================

xp_awarded_total = Counter(
    "lifequest_xp_awarded_total",
    "Total XP awarded",
    ["source", "area"],  # source: activity/daily_login/quest/bonus
)

# =============================================================================
# Level Metrics
# =============================================================================

level_ups_total = Counter(
    "lifequest_level_ups_total",
    "Total level-up events",
    ["scope"],  # scope: character or an area name
)

# =============================================================================
# Reward Metrics
# =============================================================================

rewards_granted_total = Counter(
    "lifequest_rewards_granted_total",
    "Variable rewards granted on activity logging",
    ["kind"],
)

# =============================================================================
# Streak Metrics
# =============================================================================

streak_freezes_total = Counter(
    "lifequest_streak_freezes_total",
    "Streak freeze attempts",
    ["status"],  # status: used or refusal reason
)

# =============================================================================
# Storage Metrics
# =============================================================================

snapshot_conflicts_total = Counter(
    "lifequest_snapshot_conflicts_total",
    "Snapshot writes rejected because the snapshot was stale",
)

command_retries_total = Counter(
    "lifequest_command_retries_total",
    "Command retries after a snapshot conflict",
    ["command"],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_xp(source: str, area: str, amount: int) -> None:
    """Record XP awarded"""
    if amount > 0:
        xp_awarded_total.labels(source=source, area=area).inc(amount)


def record_level_up(scope: str) -> None:
    level_ups_total.labels(scope=scope).inc()


def record_reward(kind: str) -> None:
    rewards_granted_total.labels(kind=kind).inc()


def record_freeze(status: str) -> None:
    """status is "used" or the refusal reason"""
    streak_freezes_total.labels(status=status).inc()


def record_conflict() -> None:
    snapshot_conflicts_total.inc()


def record_retry(command: str) -> None:
    command_retries_total.labels(command=command).inc()
