"""Configuration management"""
import os
from dotenv import load_dotenv

from lifequest.exceptions import ConfigurationError

load_dotenv()

# Leveling
# Level n is completed at LEVEL_XP_BASE * n cumulative XP (evaluated per level)
LEVEL_XP_BASE: int = int(os.getenv("LEVEL_XP_BASE", "100"))

# Quest recommendations
WEEKLY_XP_TARGET: int = int(os.getenv("WEEKLY_XP_TARGET", "60"))
RECOMMENDATION_LIMIT: int = int(os.getenv("RECOMMENDATION_LIMIT", "5"))

# Activity logging
# The log form offers 5-10 XP for quick tasks up to 30-50 XP for major ones
MIN_ACTIVITY_XP: int = int(os.getenv("MIN_ACTIVITY_XP", "1"))
MAX_ACTIVITY_XP: int = int(os.getenv("MAX_ACTIVITY_XP", "50"))

# Calendar days (streaks, daily logins, quest due dates) are evaluated in this zone
APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")

# Snapshot write conflicts
MAX_CONFLICT_RETRIES: int = int(os.getenv("MAX_CONFLICT_RETRIES", "3"))
RETRY_BASE_DELAY: float = float(os.getenv("RETRY_BASE_DELAY", "0.05"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if LEVEL_XP_BASE <= 0:
        raise ConfigurationError("LEVEL_XP_BASE must be positive", config_key="LEVEL_XP_BASE")
    if WEEKLY_XP_TARGET < 0:
        raise ConfigurationError("WEEKLY_XP_TARGET must not be negative", config_key="WEEKLY_XP_TARGET")
    if RECOMMENDATION_LIMIT <= 0:
        raise ConfigurationError("RECOMMENDATION_LIMIT must be positive", config_key="RECOMMENDATION_LIMIT")
    if MIN_ACTIVITY_XP <= 0:
        raise ConfigurationError("MIN_ACTIVITY_XP must be positive", config_key="MIN_ACTIVITY_XP")
    if MAX_ACTIVITY_XP < MIN_ACTIVITY_XP:
        raise ConfigurationError(
            "MAX_ACTIVITY_XP must be >= MIN_ACTIVITY_XP", config_key="MAX_ACTIVITY_XP"
        )
    if MAX_CONFLICT_RETRIES < 0:
        raise ConfigurationError("MAX_CONFLICT_RETRIES must not be negative", config_key="MAX_CONFLICT_RETRIES")
    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Unknown LOG_LEVEL '{LOG_LEVEL}'", config_key="LOG_LEVEL")
