#!/usr/bin/env python3
"""Rating service configuration

Service endpoint, batch limits and rule resolution policy for the
usage rating engine.
"""
import logging
import os
from dataclasses import dataclass, field

from .infra_config import InfraConfig
from .logging_config import LoggingConfig

logger = logging.getLogger(__name__)


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


# Longest-prefix tie handling
TIE_POLICY_LOWEST_RULE_ID = "lowest_rule_id"
TIE_POLICY_ERROR = "error"
VALID_TIE_POLICIES = (TIE_POLICY_LOWEST_RULE_ID, TIE_POLICY_ERROR)


@dataclass
class RatingConfig:
    """Rating engine settings"""
    service_name: str = "rating_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8230
    version: str = "1.0.0"

    # Batch limits
    max_batch_size: int = 10000
    max_concurrency: int = 50

    rule_tie_policy: str = TIE_POLICY_LOWEST_RULE_ID

    @classmethod
    def from_env(cls) -> 'RatingConfig':
        """Load rating config from environment variables"""
        tie_policy = os.getenv("RATING_RULE_TIE_POLICY", TIE_POLICY_LOWEST_RULE_ID).strip().lower()
        if tie_policy not in VALID_TIE_POLICIES:
            logger.warning(
                f"Unknown RATING_RULE_TIE_POLICY '{tie_policy}', using '{TIE_POLICY_LOWEST_RULE_ID}'"
            )
            tie_policy = TIE_POLICY_LOWEST_RULE_ID

        return cls(
            service_name=os.getenv("RATING_SERVICE_NAME", "rating_service"),
            service_host=os.getenv("RATING_SERVICE_HOST", "0.0.0.0"),
            service_port=_int(os.getenv("RATING_SERVICE_PORT", "8230"), 8230),
            version=os.getenv("RATING_SERVICE_VERSION", "1.0.0"),
            max_batch_size=max(1, _int(os.getenv("RATING_MAX_BATCH_SIZE", "10000"), 10000)),
            max_concurrency=max(1, _int(os.getenv("RATING_MAX_CONCURRENCY", "50"), 50)),
            rule_tie_policy=tie_policy,
        )


@dataclass
class ServiceSettings:
    """Rating service configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Sub-configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    rating: RatingConfig = field(default_factory=RatingConfig)

    @classmethod
    def from_env(cls) -> 'ServiceSettings':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            logging=LoggingConfig.from_env(),
            infrastructure=InfraConfig.from_env(),
            rating=RatingConfig.from_env(),
        )
