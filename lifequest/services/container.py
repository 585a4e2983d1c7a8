"""
Service Container - Dependency Injection Container

Simple DI container for managing service instances and their dependencies.
Uses lazy loading to only instantiate services when first accessed.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    The snapshot store and random source are injected.
    """

    # Infrastructure dependencies (injected)
    store: object  # InMemorySnapshotStore or a compatible store
    rng: Optional[object] = None  # random source for reward rolls

    # Services (lazy-loaded via properties)
    _progression_service: Optional[object] = field(default=None, init=False, repr=False)
    _command_handler: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def progression_service(self):
        """Get ProgressionService instance (lazy-loaded)"""
        if self._progression_service is None:
            from lifequest.services.progression_service import ProgressionService
            self._progression_service = ProgressionService(rng=self.rng)
            logger.debug("ProgressionService instantiated")
        return self._progression_service

    @property
    def command_handler(self):
        """Get ProgressionCommandHandler instance (lazy-loaded)"""
        if self._command_handler is None:
            from lifequest.services.command_handler import ProgressionCommandHandler
            self._command_handler = ProgressionCommandHandler(self.store, self.progression_service)
            logger.debug("ProgressionCommandHandler instantiated")
        return self._command_handler


# Global container instance (initialized in main.py)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() before using services."
        )
    return _container


def init_container(store: object, rng: Optional[object] = None) -> ServiceContainer:
    """
    Initialize the global service container.

    Should be called once at startup after infrastructure setup.

    Args:
        store: Snapshot store instance
        rng: Optional random source for reward rolls

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(store=store, rng=rng)

    logger.info("Service container initialized")
    return _container
