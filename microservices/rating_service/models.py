"""
Rating Service Data Models

Usage records, partner rate tables and pricing rules for wholesale
interconnect/roaming charge calculation.
"""

from enum import Enum
from typing import Optional, Dict, Any, List, Union
from datetime import datetime, timezone
from decimal import Decimal
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

_DATETIME = TypeAdapter(datetime)
_INT = TypeAdapter(int)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ====================
# Enums
# ====================

class ServiceKind(str, Enum):
    """Rated service kinds"""
    VOICE = "VOICE"                      # duration in seconds
    SMS = "SMS"                          # event count


class Direction(str, Enum):
    """Traffic direction (rate table vocabulary)"""
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


# Ingestion uses INCOMING/OUTGOING; rate tables use INBOUND/OUTBOUND
DIRECTION_ALIASES: Dict[str, str] = {
    "INCOMING": Direction.INBOUND.value,
    "OUTGOING": Direction.OUTBOUND.value,
    "INBOUND": Direction.INBOUND.value,
    "OUTBOUND": Direction.OUTBOUND.value,
}


class RoundingPolicy(str, Enum):
    """Voice duration rounding to whole minutes"""
    UP = "UP"
    DOWN = "DOWN"
    NEAREST = "NEAREST"
    NONE = "NONE"


class PartnerStatus(str, Enum):
    """Partner lifecycle status"""
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"                    # the only chargeable state
    SUSPENDED = "SUSPENDED"
    INACTIVE = "INACTIVE"


class RecordState(str, Enum):
    """Per-record processing state"""
    RECEIVED = "RECEIVED"
    VALIDATING = "VALIDATING"
    ELIGIBLE = "ELIGIBLE"
    RESOLVED = "RESOLVED"
    RATED = "RATED"
    FAILED = "FAILED"


class RatingStatus(str, Enum):
    """Outcome of rating a record"""
    RATED = "RATED"
    FAILED = "FAILED"


class FailureCategory(str, Enum):
    """Where a record failed"""
    VALIDATION = "VALIDATION"
    PARTNER = "PARTNER"
    RATE_TABLE = "RATE_TABLE"
    RATE_RULE = "RATE_RULE"
    REPOSITORY = "REPOSITORY"
    CALCULATION = "CALCULATION"


# ====================
# Reference data (read-only to the engine)
# ====================

class Partner(BaseModel):
    """Interconnect/roaming partner"""
    partner_id: str = Field(..., description="Partner ID")
    partner_code: str = Field(..., description="Short partner code")
    partner_name: Optional[str] = None
    status: PartnerStatus = PartnerStatus.PENDING


class RateTable(BaseModel):
    """Versioned, time-bounded price list owned by one partner"""
    rate_table_id: str = Field(..., description="Rate table ID")
    partner_id: str = Field(..., description="Owning partner ID")
    name: Optional[str] = None
    is_active: bool = True
    effective_from: datetime
    effective_to: Optional[datetime] = None  # None = open-ended


class PricingRule(BaseModel):
    """One row of a rate table"""
    rule_id: str = Field(..., description="Pricing rule ID")
    rate_table_id: str = Field(..., description="Rate table ID")
    service_kind: ServiceKind
    direction: Direction
    destination_prefix: Optional[str] = None  # None/blank = unscoped fallback
    rate_per_unit: Decimal = Field(..., ge=0, description="Price per second (VOICE) or per event (SMS)")
    currency: str = Field(default="USD", min_length=3, max_length=3)
    minimum_charge: Optional[Decimal] = Field(default=None, ge=0)
    rounding_policy: RoundingPolicy = RoundingPolicy.NONE

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        if isinstance(v, str):
            return DIRECTION_ALIASES.get(v.strip().upper(), v)
        return v

    @field_validator("rounding_policy", mode="before")
    @classmethod
    def default_rounding_policy(cls, v):
        return RoundingPolicy.NONE if v is None else v

    @property
    def is_unscoped(self) -> bool:
        return not self.destination_prefix


# ====================
# Usage records and results
# ====================

class RatingResult(BaseModel):
    """Outcome attached to a usage record"""
    status: RatingStatus

    # RATED
    charge: Optional[Decimal] = None
    currency: Optional[str] = None
    rate_applied: Optional[Decimal] = None
    billable_quantity: Optional[int] = None
    minimum_applied: bool = False
    rule_id: Optional[str] = None
    rate_table_id: Optional[str] = None

    # FAILED
    failure_reason: Optional[str] = None
    failure_category: Optional[FailureCategory] = None

    @classmethod
    def failed(cls, reason: str, category: FailureCategory) -> "RatingResult":
        return cls(status=RatingStatus.FAILED, failure_reason=reason, failure_category=category)


class UsageRecord(BaseModel):
    """
    One billable event (CDR/EDR) in normalized form.

    Input fields are optional so that missing data is reported by the
    validator rather than rejected while parsing the batch.
    """
    record_id: Optional[str] = None

    origin_number: Optional[str] = None
    destination_number: Optional[str] = None
    service_kind: Optional[str] = None
    direction: Optional[str] = None
    # Unparseable input is kept as text and reported by the validator
    event_time: Optional[Union[datetime, str]] = None
    partner_id: Optional[str] = None

    # Kind-specific quantity
    duration_seconds: Optional[Union[int, str]] = None    # VOICE
    event_count: Optional[Union[int, str]] = None         # SMS

    # Annotations
    state: RecordState = RecordState.RECEIVED
    result: Optional[RatingResult] = None

    @field_validator("record_id", "origin_number", "destination_number", "partner_id", mode="before")
    @classmethod
    def strip_identifiers(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("service_kind", mode="before")
    @classmethod
    def normalize_service_kind(cls, v):
        if isinstance(v, Enum):
            v = v.value
        if v is not None and not isinstance(v, str):
            v = str(v)
        if isinstance(v, str):
            return v.strip().upper() or None
        return v

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        """Map ingestion vocabulary onto the rate table vocabulary"""
        if isinstance(v, Enum):
            v = v.value
        if v is not None and not isinstance(v, str):
            v = str(v)
        if isinstance(v, str):
            v = v.strip().upper()
            if not v:
                return None
            return DIRECTION_ALIASES.get(v, v)
        return v

    @field_validator("event_time", mode="before")
    @classmethod
    def parse_event_time(cls, v):
        """Parse to an aware UTC datetime; naive values are UTC"""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        try:
            return as_utc(_DATETIME.validate_python(v))
        except ValidationError:
            return str(v)

    @field_validator("duration_seconds", "event_count", mode="before")
    @classmethod
    def parse_quantity(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if isinstance(v, bool):
            return str(v)
        try:
            return _INT.validate_python(v)
        except ValidationError:
            return str(v)

    @property
    def is_complete(self) -> bool:
        return self.state in (RecordState.RATED, RecordState.FAILED)


class ChargeCalculation(BaseModel):
    """Charge calculator output"""
    amount: Decimal
    currency: str
    rate_applied: Decimal
    raw_quantity: int
    billable_quantity: int
    minimum_applied: bool = False


# ====================
# Request / response models
# ====================

class RateRecordsResponse(BaseModel):
    """Response for rating one or more records"""
    success: bool = True
    processed_count: int
    records: List[UsageRecord]


class RatingBatchRequest(BaseModel):
    """Batch rating request"""
    records: List[UsageRecord] = Field(default_factory=list)


class BatchStatistics(BaseModel):
    """Rated/failed breakdown of a batch"""
    total: int = 0
    rated: int = 0
    failed: int = 0
    success_rate: str = "0.00%"
    by_service_kind: Dict[str, int] = Field(default_factory=dict)


class CurrencyAmount(BaseModel):
    """Revenue in one currency"""
    currency: str
    amount: Decimal


class BatchRevenue(BaseModel):
    """Revenue of the rated records, per currency"""
    by_currency: List[CurrencyAmount] = Field(default_factory=list)


class ErrorCount(BaseModel):
    """Failure reason with number of occurrences"""
    message: str
    count: int


class RatingBatchResult(BaseModel):
    """Annotated records plus batch summary"""
    success: bool = True
    batch_id: str
    processed_count: int
    processing_time_ms: int = 0
    statistics: BatchStatistics = Field(default_factory=BatchStatistics)
    revenue: BatchRevenue = Field(default_factory=BatchRevenue)
    errors: List[ErrorCount] = Field(default_factory=list)
    records: List[UsageRecord] = Field(default_factory=list)


# ====================
# System models
# ====================

class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str]


class ServiceInfo(BaseModel):
    """Liveness / capability probe"""
    service: str
    status: str = "operational"
    version: str
    description: str
    capabilities: List[str]
    supported_service_kinds: List[ServiceKind]
    supported_rounding_policies: List[RoundingPolicy]
    max_batch_size: int
    metadata: Dict[str, Any] = Field(default_factory=dict)
