"""
Rate Resolver

Selects the applicable rate table for a partner at the event time, then the
pricing rule inside it by longest destination-prefix match.

Rate table selection:
    - active, effective_from <= event time <= effective_to (open-ended when unset)
    - most recent effective_from wins

Rule selection:
    - service kind and direction must match exactly
    - among rules whose prefix is a literal string prefix of the destination,
      the longest prefix wins
    - otherwise the first unscoped rule (no prefix) in repository order
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from core.config import TIE_POLICY_ERROR, TIE_POLICY_LOWEST_RULE_ID

from .models import Direction, Partner, PricingRule, RateTable, ServiceKind, UsageRecord, as_utc
from .protocols import (
    AmbiguousRateRuleError,
    RateRepositoryProtocol,
    RateRuleNotFoundError,
    RateTableNotFoundError,
)

logger = logging.getLogger(__name__)


def is_rate_table_applicable(rate_table: RateTable, at_time: datetime) -> bool:
    """Active and effective at the given instant (bounds inclusive)"""
    if not rate_table.is_active:
        return False
    at_time = as_utc(at_time)
    if as_utc(rate_table.effective_from) > at_time:
        return False
    if rate_table.effective_to is not None and as_utc(rate_table.effective_to) < at_time:
        return False
    return True


def select_rate_table(candidates: Sequence[RateTable], at_time: datetime) -> Optional[RateTable]:
    """Pick the applicable rate table with the latest effective_from"""
    selected: Optional[RateTable] = None
    for rate_table in candidates:
        if not is_rate_table_applicable(rate_table, at_time):
            continue
        # Strict comparison keeps repository order on equal effective_from
        if selected is None or as_utc(rate_table.effective_from) > as_utc(selected.effective_from):
            selected = rate_table
    return selected


def select_rule(
    rules: Sequence[PricingRule],
    service_kind: ServiceKind,
    direction: Direction,
    destination: str,
    tie_policy: str = TIE_POLICY_LOWEST_RULE_ID,
) -> Optional[PricingRule]:
    """
    Longest-prefix-match over the rules of one rate table.

    Args:
        rules: Candidate rules in repository order
        service_kind: Canonical service kind of the record
        direction: Canonical direction of the record
        destination: Destination number, matched as a plain string
        tie_policy: What to do when several rules share the longest prefix

    Returns:
        The selected rule, or None when nothing matches

    Raises:
        AmbiguousRateRuleError: Longest prefix tie under the "error" policy
    """
    matching = [
        rule for rule in rules
        if rule.service_kind == service_kind and rule.direction == direction
    ]
    if not matching:
        return None

    prefix_matches = [
        rule for rule in matching
        if rule.destination_prefix and destination.startswith(rule.destination_prefix)
    ]
    if prefix_matches:
        longest = max(len(rule.destination_prefix) for rule in prefix_matches)
        best = [rule for rule in prefix_matches if len(rule.destination_prefix) == longest]
        if len(best) == 1:
            return best[0]

        rule_ids = [rule.rule_id for rule in best]
        if tie_policy == TIE_POLICY_ERROR:
            raise AmbiguousRateRuleError(
                f"Ambiguous rate rule for {service_kind.value} {direction.value} to {destination}: "
                f"rules {', '.join(rule_ids)} share prefix {best[0].destination_prefix}",
                rule_ids=rule_ids,
            )
        logger.warning(f"Rules {rule_ids} tie on prefix {best[0].destination_prefix}, using lowest rule_id")
        return min(best, key=lambda rule: rule.rule_id)

    for rule in matching:
        if rule.is_unscoped:
            return rule
    return None


class RateResolver:
    """Resolves the rate table and pricing rule for a usage record"""

    def __init__(
        self,
        repository: RateRepositoryProtocol,
        tie_policy: str = TIE_POLICY_LOWEST_RULE_ID,
    ):
        self.repository = repository
        self.tie_policy = tie_policy

    async def resolve_rate_table(self, partner: Partner, at_time: datetime) -> RateTable:
        """Get the rate table valid for the partner at the event time"""
        at_time = as_utc(at_time)
        candidates = await self.repository.get_applicable_rate_tables(partner.partner_id, at_time)
        rate_table = select_rate_table(candidates, at_time)
        if rate_table is None:
            raise RateTableNotFoundError(
                f"No active rate table found for partner {partner.partner_code}"
            )
        logger.debug(
            f"Rate table {rate_table.rate_table_id} selected for partner {partner.partner_code} "
            f"({len(candidates)} candidates)"
        )
        return rate_table

    async def resolve_rule(
        self,
        rate_table: RateTable,
        service_kind: ServiceKind,
        direction: Direction,
        destination: str,
    ) -> PricingRule:
        """Get the pricing rule of the rate table for the record's traffic"""
        rules: List[PricingRule] = await self.repository.get_rules(
            rate_table.rate_table_id, service_kind, direction
        )
        rule = select_rule(rules, service_kind, direction, destination, self.tie_policy)
        if rule is None:
            raise RateRuleNotFoundError(
                f"No rate found for {service_kind.value} {direction.value} to {destination}"
            )
        return rule

    async def resolve(self, partner: Partner, record: UsageRecord) -> Tuple[RateTable, PricingRule]:
        """Resolve rate table and rule for a validated record"""
        rate_table = await self.resolve_rate_table(partner, record.event_time)
        rule = await self.resolve_rule(
            rate_table,
            ServiceKind(record.service_kind),
            Direction(record.direction),
            record.destination_number,
        )
        return rate_table, rule


__all__ = [
    "RateResolver",
    "is_rate_table_applicable",
    "select_rate_table",
    "select_rule",
]
