"""
Charge Calculator

Converts a usage quantity into a monetary amount for a resolved pricing rule.
Pure function of (record, rule); all arithmetic is Decimal.
"""

from decimal import Decimal, ROUND_HALF_UP, ROUND_UP

from .models import ChargeCalculation, PricingRule, RoundingPolicy, ServiceKind, UsageRecord

SECONDS_PER_MINUTE = 60
FOURPLACES = Decimal("0.0001")


def billable_seconds(duration: int, policy: RoundingPolicy) -> int:
    """
    Apply a rounding policy to a call duration.

    UP rounds partial minutes to the next full minute (0 stays 0), DOWN
    truncates to the preceding full minute, NEAREST rounds half up to the
    closest minute and NONE keeps the raw seconds.
    """
    if duration <= 0:
        return 0

    minutes, remainder = divmod(duration, SECONDS_PER_MINUTE)
    if policy == RoundingPolicy.UP:
        if remainder:
            minutes += 1
    elif policy == RoundingPolicy.DOWN:
        pass
    elif policy == RoundingPolicy.NEAREST:
        if remainder * 2 >= SECONDS_PER_MINUTE:
            minutes += 1
    else:
        return duration
    return minutes * SECONDS_PER_MINUTE


def quantize_amount(value: Decimal) -> Decimal:
    """Round to 4 decimal places, half up"""
    return value.quantize(FOURPLACES, rounding=ROUND_HALF_UP)


def calculate_charge(record: UsageRecord, rule: PricingRule) -> ChargeCalculation:
    """
    Compute the charge of a validated record under a pricing rule.

    VOICE: billable seconds (after rounding) x rate per unit.
    SMS: event count x rate per unit, no rounding.
    The minimum charge applies as a floor; the result has 4 decimal places.
    """
    rate = Decimal(rule.rate_per_unit)

    if record.service_kind == ServiceKind.VOICE.value:
        raw_quantity = record.duration_seconds or 0
        billable = billable_seconds(raw_quantity, rule.rounding_policy)
    else:
        raw_quantity = record.event_count or 1
        billable = raw_quantity

    amount = Decimal(billable) * rate

    minimum_applied = False
    if rule.minimum_charge is not None and amount < rule.minimum_charge:
        amount = Decimal(rule.minimum_charge)
        minimum_applied = True

    amount = quantize_amount(amount)
    if rule.minimum_charge is not None and amount < rule.minimum_charge:
        # Floors with more than 4 decimals round away from zero to stay a floor
        amount = Decimal(rule.minimum_charge).quantize(FOURPLACES, rounding=ROUND_UP)
        minimum_applied = True

    return ChargeCalculation(
        amount=amount,
        currency=rule.currency,
        rate_applied=rate,
        raw_quantity=raw_quantity,
        billable_quantity=billable,
        minimum_applied=minimum_applied,
    )


__all__ = ["billable_seconds", "quantize_amount", "calculate_charge", "FOURPLACES"]
