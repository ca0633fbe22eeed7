"""
Rating Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from .models import (
    Direction,
    FailureCategory,
    Partner,
    PartnerStatus,
    PricingRule,
    RateTable,
    ServiceKind,
)


# ====================
# Repository Protocol
# ====================


class RateRepositoryProtocol(Protocol):
    """Protocol for partner / rate table data access (read-only)"""

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    async def health_check(self) -> Dict[str, Any]:
        """Check repository connectivity"""
        ...

    async def get_partner(self, partner_id: str) -> Optional[Partner]:
        """Get partner by ID"""
        ...

    async def get_applicable_rate_tables(
        self, partner_id: str, at_time: datetime
    ) -> List[RateTable]:
        """Get candidate rate tables for a partner at a point in time"""
        ...

    async def get_rules(
        self,
        rate_table_id: str,
        service_kind: ServiceKind,
        direction: Direction,
    ) -> List[PricingRule]:
        """Get pricing rules of a rate table for a service kind and direction"""
        ...


# ====================
# Custom Exceptions (no I/O operations)
# ====================


class RatingServiceError(Exception):
    """Base exception for rating service errors"""

    category: Optional[FailureCategory] = None


class RecordValidationError(RatingServiceError):
    """Raised when a usage record misses a required field or is out of range"""

    category = FailureCategory.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PartnerNotFoundError(RatingServiceError):
    """Raised when the owning partner does not exist"""

    category = FailureCategory.PARTNER

    def __init__(self, message: str, partner_id: Optional[str] = None):
        super().__init__(message)
        self.partner_id = partner_id


class PartnerNotActiveError(RatingServiceError):
    """Raised when the owning partner is not in a chargeable state"""

    category = FailureCategory.PARTNER

    def __init__(self, message: str, partner_code: str, status: PartnerStatus):
        super().__init__(message)
        self.partner_code = partner_code
        self.status = status


class RateTableNotFoundError(RatingServiceError):
    """Raised when no rate table applies to the partner at the event time"""

    category = FailureCategory.RATE_TABLE


class RateRuleNotFoundError(RatingServiceError):
    """Raised when no pricing rule matches kind, direction and destination"""

    category = FailureCategory.RATE_RULE


class AmbiguousRateRuleError(RateRuleNotFoundError):
    """Raised when several rules tie on the longest matching prefix"""

    def __init__(self, message: str, rule_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.rule_ids = rule_ids or []


class RepositoryError(RatingServiceError):
    """Raised when a repository read fails"""

    category = FailureCategory.REPOSITORY


class RepositoryUnavailableError(RepositoryError):
    """Raised when the repository cannot be reached at all"""

    pass


class BatchValidationError(RatingServiceError):
    """Raised when a batch is malformed (empty or too large)"""

    def __init__(self, message: str, provided: Optional[int] = None):
        super().__init__(message)
        self.provided = provided


__all__ = [
    "RateRepositoryProtocol",
    "RatingServiceError",
    "RecordValidationError",
    "PartnerNotFoundError",
    "PartnerNotActiveError",
    "RateTableNotFoundError",
    "RateRuleNotFoundError",
    "AmbiguousRateRuleError",
    "RepositoryError",
    "RepositoryUnavailableError",
    "BatchValidationError",
]
