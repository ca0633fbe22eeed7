"""
Usage Record Validator

Checks a usage record for completeness before any repository lookup.
The first failing check wins; errors are not accumulated.
"""

from datetime import datetime
from typing import Optional

from .models import Direction, ServiceKind, UsageRecord
from .protocols import RecordValidationError

SUPPORTED_SERVICE_KINDS = {kind.value for kind in ServiceKind}
SUPPORTED_DIRECTIONS = {direction.value for direction in Direction}


def _is_count(value, minimum: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


def validate_usage_record(record: UsageRecord) -> None:
    """
    Validate a usage record.

    Checks, in order: origin, destination, service kind, direction,
    event time, owning partner, then the kind-specific quantity.

    Raises:
        RecordValidationError: On the first missing or invalid field
    """
    if not record.origin_number:
        raise RecordValidationError("Missing origin_number", field="origin_number")
    if not record.destination_number:
        raise RecordValidationError("Missing destination_number", field="destination_number")

    if not record.service_kind:
        raise RecordValidationError("Missing service_kind", field="service_kind")
    if record.service_kind not in SUPPORTED_SERVICE_KINDS:
        raise RecordValidationError(
            f"Unrecognized service_kind: {record.service_kind}", field="service_kind"
        )

    if not record.direction:
        raise RecordValidationError("Missing direction", field="direction")
    if record.direction not in SUPPORTED_DIRECTIONS:
        raise RecordValidationError(
            f"Unrecognized direction: {record.direction}", field="direction"
        )

    if record.event_time is None:
        raise RecordValidationError("Missing event_time", field="event_time")
    if not isinstance(record.event_time, datetime):
        raise RecordValidationError("Invalid event_time", field="event_time")
    if not record.partner_id:
        raise RecordValidationError("Missing partner_id", field="partner_id")

    if record.service_kind == ServiceKind.VOICE.value:
        if not _is_count(record.duration_seconds, minimum=0):
            raise RecordValidationError(
                "Missing or invalid duration for VOICE call", field="duration_seconds"
            )
    elif record.service_kind == ServiceKind.SMS.value:
        if not _is_count(record.event_count, minimum=1):
            raise RecordValidationError(
                "Missing or invalid event_count for SMS", field="event_count"
            )


def check_usage_record(record: UsageRecord) -> Optional[str]:
    """Return the validation failure reason, or None when the record is valid"""
    try:
        validate_usage_record(record)
    except RecordValidationError as e:
        return str(e)
    return None


__all__ = ["validate_usage_record", "check_usage_record"]
