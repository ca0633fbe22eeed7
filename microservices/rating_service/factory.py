"""
Rating Service Factory

Factory for creating RatingService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config import ServiceSettings, get_settings

from .protocols import RateRepositoryProtocol
from .rating_repository import RatingRepository
from .rating_service import RatingService

logger = logging.getLogger(__name__)


def create_rating_service(
    settings: Optional[ServiceSettings] = None,
    repository: Optional[RateRepositoryProtocol] = None,
) -> RatingService:
    """
    Create RatingService with all real dependencies

    Args:
        settings: Optional settings (global settings if not provided)
        repository: Optional repository (PostgreSQL repository if not provided)

    Returns:
        Fully initialized RatingService instance
    """
    if settings is None:
        settings = get_settings()

    if repository is None:
        repository = RatingRepository(config=settings.infrastructure)
        logger.info("✅ PostgreSQL rate repository created for rating service")

    return RatingService(repository=repository, config=settings.rating)


__all__ = ["create_rating_service"]
