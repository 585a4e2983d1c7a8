"""
Exception hierarchy for lifequest

Every error carries the user and command it belongs to plus a message that
can be shown to the player. Errors log themselves when raised, at a level
that matches how surprising they are: bad input is a warning, a lost write
race is routine, a missing provisioned row is an error.

The progression engine never swallows these: commands either return a typed
result or raise one of the errors below before any state has changed.
"""

from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class LifeQuestError(Exception):
    """
    Base exception for all lifequest errors

    Example:
        raise LifeQuestError(
            message="Failed to update area progress",
            user_id="user-1",
            operation="log_activity",
            context={"area": "physical"}
        )
    """

    log_level = logging.ERROR
    default_user_message = "Something went wrong with your progress. Please try again."

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.operation = operation
        self.context = context or {}
        self.user_message = user_message or self.default_user_message

        self._log_error()

    def _log_error(self) -> None:
        logger.log(
            self.log_level,
            f"{self.__class__.__name__} in {self.operation or 'unknown command'} "
            f"for user {self.user_id or '-'}: {self.message}",
            extra={
                "lifequest_error": self.__class__.__name__,
                "lifequest_user_id": self.user_id,
                "lifequest_operation": self.operation,
                "lifequest_context": self.context,
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        """Payload a host can return to the client"""
        return {
            "error": self.__class__.__name__,
            "operation": self.operation,
            "message": self.message,
            "user_message": self.user_message,
            "context": self.context,
        }


# ==========================================
# Validation Errors (Caller Input)
# ==========================================

class ValidationError(LifeQuestError):
    """
    Raised when a command fails validation

    Examples:
    - Non-positive or out-of-range XP value
    - Unknown life area
    - Completing a quest that already expired

    Example:
        raise ValidationError(
            message="XP must be between 1 and 50",
            field="base_xp",
            value=-5,
            user_id="user-1"
        )
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Data Integrity / Storage Errors
# ==========================================

class DataError(LifeQuestError):
    """
    Base class for progress-data errors
    """
    pass


class RecordNotFoundError(DataError):
    """
    Requested record does not exist

    AreaProgress and Streak rows are provisioned at account creation, so a
    missing one is a data-integrity fault rather than a normal branch.
    """

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


NotFoundError = RecordNotFoundError


class ConcurrencyConflict(DataError):
    """Snapshot was stale at write time; the caller must reload and retry"""

    # Retried by the command handler, only the final failure matters
    log_level = logging.INFO

    def __init__(
        self,
        message: str = "Progress snapshot was modified concurrently",
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
        **kwargs
    ):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            message=message,
            user_message="Your progress was updated elsewhere. Please try again.",
            context={"expected_version": expected_version, "actual_version": actual_version},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(LifeQuestError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )
