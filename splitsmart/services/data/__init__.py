"""Storage backends and backend selection."""

import logging
from typing import Optional

from splitsmart.services.config import Settings, get_settings
from splitsmart.services.data.base import DataService
from splitsmart.services.data.memory import MemoryDataService
from splitsmart.services.data.sql import SqlDataService
from splitsmart.services.db import create_session_factory

logger = logging.getLogger(__name__)


def create_data_service(settings: Optional[Settings] = None) -> DataService:
    """Build the storage backend named by settings.data_backend.

    Called once at process start; the returned instance is passed by
    reference to the services that need it.

    Args:
        settings: Settings to use (default: get_settings())

    Returns:
        MemoryDataService or SqlDataService

    Raises:
        ValueError: If the backend name is unknown
    """
    settings = settings or get_settings()

    if settings.data_backend == "memory":
        logger.info("Using in-memory data backend")
        return MemoryDataService(seed_demo_data=settings.seed_demo_data)

    if settings.data_backend == "sql":
        session_factory = create_session_factory(settings.database_url, echo=settings.database_echo)
        logger.info("Using SQL data backend")
        return SqlDataService(session_factory())

    raise ValueError(f"Unknown data backend: {settings.data_backend}")


__all__ = ["DataService", "MemoryDataService", "SqlDataService", "create_data_service"]
