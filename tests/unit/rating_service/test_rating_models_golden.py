"""
Rating Models Golden Tests

🔒 GOLDEN: These tests document CURRENT behavior of rating models.
   DO NOT MODIFY unless behavior intentionally changes.

Usage:
    pytest tests/unit/rating_service -v
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from microservices.rating_service.models import (
    DIRECTION_ALIASES,
    Direction,
    FailureCategory,
    PartnerStatus,
    PricingRule,
    RatingResult,
    RatingStatus,
    RecordState,
    RoundingPolicy,
    ServiceKind,
    UsageRecord,
)

pytestmark = [pytest.mark.unit, pytest.mark.golden]


# =============================================================================
# Enum Tests - Current Behavior
# =============================================================================

class TestRatingEnums:
    """Characterization: enum values"""

    def test_service_kinds(self):
        assert {k.value for k in ServiceKind} == {"VOICE", "SMS"}

    def test_rounding_policies(self):
        assert {p.value for p in RoundingPolicy} == {"UP", "DOWN", "NEAREST", "NONE"}

    def test_partner_statuses(self):
        assert {s.value for s in PartnerStatus} == {"PENDING", "ACTIVE", "SUSPENDED", "INACTIVE"}

    def test_failure_categories(self):
        assert {c.value for c in FailureCategory} == {
            "VALIDATION", "PARTNER", "RATE_TABLE", "RATE_RULE", "REPOSITORY", "CALCULATION"
        }

    def test_record_states(self):
        assert {s.value for s in RecordState} == {
            "RECEIVED", "VALIDATING", "ELIGIBLE", "RESOLVED", "RATED", "FAILED"
        }

    def test_direction_aliases(self):
        assert DIRECTION_ALIASES["INCOMING"] == "INBOUND"
        assert DIRECTION_ALIASES["OUTGOING"] == "OUTBOUND"


# =============================================================================
# UsageRecord - Current Behavior
# =============================================================================

class TestUsageRecordModel:
    """Characterization: usage record normalization"""

    def test_ingestion_direction_mapped(self):
        assert UsageRecord(direction="incoming").direction == Direction.INBOUND.value
        assert UsageRecord(direction="OUTGOING").direction == Direction.OUTBOUND.value

    def test_canonical_direction_kept(self):
        assert UsageRecord(direction="INBOUND").direction == "INBOUND"

    def test_unknown_direction_kept_for_validator(self):
        assert UsageRecord(direction="sideways").direction == "SIDEWAYS"

    def test_service_kind_upper_cased(self):
        assert UsageRecord(service_kind=" voice ").service_kind == "VOICE"

    def test_blank_values_become_none(self):
        record = UsageRecord(origin_number="  ", service_kind="", direction=" ")
        assert record.origin_number is None
        assert record.service_kind is None
        assert record.direction is None

    def test_new_record_is_received(self):
        record = UsageRecord()
        assert record.state == RecordState.RECEIVED
        assert record.result is None
        assert record.is_complete is False

    def test_event_time_parsed_from_iso_string(self):
        record = UsageRecord(event_time="2024-06-15T12:00:00Z")
        assert record.event_time == datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

    def test_naive_event_time_is_utc(self):
        record = UsageRecord(event_time=datetime(2024, 6, 1, 0, 0))
        assert record.event_time.tzinfo is not None
        assert record.event_time == datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)

    def test_offset_event_time_converted_to_utc(self):
        record = UsageRecord(event_time="2024-06-01T02:00:00+02:00")
        assert record.event_time == datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)
        assert record.event_time.utcoffset() == timedelta(0)

    def test_unparseable_event_time_kept_as_text(self):
        assert UsageRecord(event_time="yesterday").event_time == "yesterday"

    def test_numeric_text_quantities_parsed(self):
        record = UsageRecord(duration_seconds="125", event_count=3.0)
        assert record.duration_seconds == 125
        assert record.event_count == 3

    def test_non_integer_duration_kept_as_text(self):
        assert UsageRecord(duration_seconds="12.5s").duration_seconds == "12.5s"
        assert UsageRecord(duration_seconds=12.5).duration_seconds == "12.5"

    def test_numeric_identifiers_become_text(self):
        record = UsageRecord(origin_number=447700900123, record_id=42)
        assert record.origin_number == "447700900123"
        assert record.record_id == "42"


# =============================================================================
# PricingRule - Current Behavior
# =============================================================================

class TestPricingRuleModel:
    """Characterization: pricing rule defaults"""

    def _rule(self, **kwargs):
        data = {
            "rule_id": "r1",
            "rate_table_id": "rt1",
            "service_kind": "VOICE",
            "direction": "OUTBOUND",
            "rate_per_unit": Decimal("0.01"),
        }
        data.update(kwargs)
        return PricingRule(**data)

    def test_defaults(self):
        rule = self._rule()
        assert rule.currency == "USD"
        assert rule.minimum_charge is None
        assert rule.rounding_policy == RoundingPolicy.NONE
        assert rule.is_unscoped is True

    def test_null_rounding_policy_is_none(self):
        assert self._rule(rounding_policy=None).rounding_policy == RoundingPolicy.NONE

    def test_ingestion_direction_accepted(self):
        assert self._rule(direction="OUTGOING").direction == Direction.OUTBOUND

    def test_negative_rate_rejected(self):
        with pytest.raises(ValidationError):
            self._rule(rate_per_unit=Decimal("-0.01"))

    def test_scoped_rule(self):
        assert self._rule(destination_prefix="44").is_unscoped is False


class TestRatingResultModel:

    def test_failed_constructor(self):
        result = RatingResult.failed("Missing origin_number", FailureCategory.VALIDATION)
        assert result.status == RatingStatus.FAILED
        assert result.failure_reason == "Missing origin_number"
        assert result.charge is None
