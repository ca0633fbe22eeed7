"""
Service Logger Setup

Configures standard-library logging for a microservice from LoggingConfig.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("rating_service", level="INFO")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig

_configured_services = set()


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure and return the logger for a service.

    Args:
        service_name: Service name, used as the logger name
        level: Optional level override (DEBUG, INFO, ...)
        config: Optional logging config (loaded from environment if not provided)

    Returns:
        Configured logger
    """
    if config is None:
        config = LoggingConfig.from_env()

    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)
    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)

    if service_name in _configured_services:
        return logger

    formatter = logging.Formatter(config.log_format)

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Module loggers under microservices.* share the service handlers
    package_logger = logging.getLogger(f"microservices.{service_name}")
    package_logger.setLevel(log_level)
    for handler in logger.handlers:
        package_logger.addHandler(handler)

    _configured_services.add(service_name)
    return logger


__all__ = ["setup_service_logger"]
