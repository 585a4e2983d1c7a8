"""
Service Layer Package

Business logic services between the host application (UI, API, scheduled
jobs) and snapshot storage.

- ProgressionService: pure progression rules over snapshots
- ProgressionCommandHandler: load / apply / save with per-user serialization
"""

from lifequest.services.container import ServiceContainer, get_container, init_container
from lifequest.services.progression_service import ProgressionService, ProgressionResult
from lifequest.services.command_handler import ProgressionCommandHandler

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "ProgressionService",
    "ProgressionResult",
    "ProgressionCommandHandler",
]
