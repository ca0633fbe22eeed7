#!/usr/bin/env python3
"""
Core Module for the Rating Service

Shared infrastructure components.

COMPONENTS:
    - config/: Environment-driven configuration (dataclasses + dotenv)
    - logger.py: Service logger setup
    - postgres_client.py: asyncpg-backed PostgreSQL client

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    settings = get_settings()
    logger = setup_service_logger(settings.rating.service_name)
"""

from .config import ServiceSettings, get_settings
from .logger import setup_service_logger

__all__ = [
    "ServiceSettings",
    "get_settings",
    "setup_service_logger",
]

__version__ = "1.0.0"
