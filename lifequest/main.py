"""Main entry point: configure logging and wire the progression engine"""
import logging

from lifequest.config import validate_config, LOG_LEVEL
from lifequest.db.snapshot_store import InMemorySnapshotStore
from lifequest.services.container import ServiceContainer, init_container

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for the host process"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, level.upper())
    )


def bootstrap() -> ServiceContainer:
    """Validate configuration and build the global service container"""
    configure_logging()

    logger.info("Validating configuration...")
    validate_config()

    logger.info("Initializing snapshot store...")
    container = init_container(InMemorySnapshotStore())

    logger.info("Progression engine ready")
    return container
