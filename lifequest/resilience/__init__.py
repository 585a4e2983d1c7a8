"""Resilience patterns for snapshot writes

Retry with exponential backoff when a snapshot write loses a race.
"""

from lifequest.resilience.retry import retry_with_backoff, with_retry

__all__ = [
    "retry_with_backoff",
    "with_retry",
]
