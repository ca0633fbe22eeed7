"""
Rating Service Component Test Fixtures

Provides mocks for rating service component testing:
- MockRateRepository: In-memory implementation of RateRepositoryProtocol
- rating_service: RatingService wired to the mock repository
"""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from core.config import RatingConfig
from microservices.rating_service.models import (
    Direction,
    Partner,
    PartnerStatus,
    PricingRule,
    RateTable,
    ServiceKind,
)
from tests.contracts.rating.data_contract import RatingTestDataFactory


# =============================================================================
# Mock Repository Implementation
# =============================================================================


class MockRateRepository:
    """
    Mock implementation of RateRepositoryProtocol for testing.

    Provides in-memory storage for partners, rate tables and pricing rules.
    """

    def __init__(self):
        self.partners: Dict[str, Partner] = {}
        self.rate_tables: List[RateTable] = []
        self.rules: List[PricingRule] = []

        # Errors raised by the named method on every call
        self.errors: Dict[str, Exception] = {}
        self.delay: float = 0.0

        # Track method calls for verification
        self.method_calls = []
        self.initialized = False
        self.closed = False

    def reset(self):
        """Reset all stored data"""
        self.partners.clear()
        self.rate_tables.clear()
        self.rules.clear()
        self.errors.clear()
        self.method_calls.clear()

    def _maybe_raise(self, method: str):
        if method in self.errors:
            raise self.errors[method]

    # Protocol methods

    async def initialize(self):
        self.initialized = True

    async def close(self):
        self.closed = True

    async def health_check(self):
        return {"healthy": "health_check" not in self.errors}

    async def get_partner(self, partner_id: str) -> Optional[Partner]:
        """Get partner by ID"""
        self.method_calls.append(("get_partner", partner_id))
        self._maybe_raise("get_partner")
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.partners.get(partner_id)

    async def get_applicable_rate_tables(self, partner_id: str, at_time: datetime) -> List[RateTable]:
        """Get rate tables of a partner (selection is left to the resolver)"""
        self.method_calls.append(("get_applicable_rate_tables", partner_id, at_time))
        self._maybe_raise("get_applicable_rate_tables")
        return [t for t in self.rate_tables if t.partner_id == partner_id]

    async def get_rules(
        self, rate_table_id: str, service_kind: ServiceKind, direction: Direction
    ) -> List[PricingRule]:
        """Get rules of a rate table for kind and direction"""
        self.method_calls.append(("get_rules", rate_table_id, service_kind, direction))
        self._maybe_raise("get_rules")
        return [
            r for r in self.rules
            if r.rate_table_id == rate_table_id
            and r.service_kind == service_kind
            and r.direction == direction
        ]

    # Test helpers

    def add_partner(self, status: PartnerStatus = PartnerStatus.ACTIVE, **kwargs) -> Partner:
        partner = RatingTestDataFactory.make_partner(status=status, **kwargs)
        self.partners[partner.partner_id] = partner
        return partner

    def add_rate_table(self, partner_id: str, **kwargs) -> RateTable:
        rate_table = RatingTestDataFactory.make_rate_table(partner_id=partner_id, **kwargs)
        self.rate_tables.append(rate_table)
        return rate_table

    def add_rule(self, rate_table_id: str, **kwargs) -> PricingRule:
        rule = RatingTestDataFactory.make_rule(rate_table_id=rate_table_id, **kwargs)
        self.rules.append(rule)
        return rule

    def calls_to(self, method: str) -> list:
        return [c for c in self.method_calls if c[0] == method]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_repository():
    """Create mock rate repository"""
    return MockRateRepository()


@pytest.fixture
def rating_config():
    """Rating settings with small limits"""
    return RatingConfig(max_batch_size=100, max_concurrency=4)


@pytest.fixture
def rating_service(mock_repository, rating_config):
    """Create rating service with mocked dependencies"""
    from microservices.rating_service.rating_service import RatingService

    return RatingService(repository=mock_repository, config=rating_config)


@pytest.fixture
def seeded_partner(mock_repository):
    """
    ACTIVE partner with one rate table:
    VOICE OUTBOUND 1 / 1212 / 44 / 4477 / default, SMS OUTBOUND 44
    """
    partner = mock_repository.add_partner(partner_code="TELCO1")
    table = mock_repository.add_rate_table(partner.partner_id, rate_table_id="rt_main")
    repo = mock_repository
    repo.add_rule(table.rate_table_id, rule_id="v_us", destination_prefix="1",
                  rate_per_unit="0.01", rounding_policy="UP")
    repo.add_rule(table.rate_table_id, rule_id="v_nyc", destination_prefix="1212",
                  rate_per_unit="0.005", rounding_policy="UP")
    repo.add_rule(table.rate_table_id, rule_id="v_uk", destination_prefix="44",
                  rate_per_unit="0.02", rounding_policy="UP", minimum_charge="0.50")
    repo.add_rule(table.rate_table_id, rule_id="v_uk_mobile", destination_prefix="4477",
                  rate_per_unit="0.03", rounding_policy="NONE", currency="GBP")
    repo.add_rule(table.rate_table_id, rule_id="v_default", destination_prefix=None,
                  rate_per_unit="0.10", rounding_policy="DOWN")
    repo.add_rule(table.rate_table_id, rule_id="s_uk", service_kind="SMS",
                  destination_prefix="44", rate_per_unit="0.05")
    return partner
