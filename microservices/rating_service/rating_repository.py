"""
Rating Service Data Repository

Data access layer - PostgreSQL (asyncpg)
Implements RateRepositoryProtocol from protocols.py
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import asyncpg

from core.config import InfraConfig
from core.postgres_client import PostgresClient

from .models import Direction, Partner, PricingRule, RateTable, ServiceKind, as_utc
from .protocols import RepositoryError, RepositoryUnavailableError

logger = logging.getLogger(__name__)

# Failures that mean the database cannot be reached at all
CONNECTION_ERRORS = (
    OSError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.ConnectionDoesNotExistError,
    asyncpg.exceptions.TooManyConnectionsError,
    asyncpg.exceptions.InterfaceError,
)


class RatingRepository:
    """Rating service data repository - PostgreSQL (read-only)"""

    def __init__(
        self,
        config: Optional[InfraConfig] = None,
        db: Optional[PostgresClient] = None,
    ):
        if db is None:
            db = PostgresClient(service_name="rating_service", config=config)

        self.db = db
        self.schema = "rating"
        self.partners_table = "partners"
        self.rate_tables_table = "rate_tables"
        self.pricing_rules_table = "pricing_rules"

    async def initialize(self):
        """Initialize database connection"""
        try:
            async with self.db:
                pass
        except CONNECTION_ERRORS as e:
            raise RepositoryUnavailableError(f"Rate repository unavailable: {e}") from e
        logger.info("Rating repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Rating repository database connection closed")

    async def health_check(self) -> Dict[str, Any]:
        """Check database connectivity"""
        try:
            return await self.db.health_check() or {"healthy": False}
        except Exception as e:
            logger.warning(f"Rating repository health check failed: {e}")
            return {"healthy": False, "error": str(e)}

    async def _query(self, sql: str, params: List[Any], operation: str) -> List[Dict[str, Any]]:
        try:
            async with self.db:
                return await self.db.query(sql, params=params)
        except CONNECTION_ERRORS as e:
            logger.error(f"Rate repository unreachable during {operation}: {e}")
            raise RepositoryUnavailableError(f"Rate repository unavailable: {e}") from e
        except asyncpg.PostgresError as e:
            logger.error(f"Error in {operation}: {e}", exc_info=True)
            raise RepositoryError(f"{operation} failed: {e}") from e

    # ====================
    # Partners
    # ====================

    async def get_partner(self, partner_id: str) -> Optional[Partner]:
        """Get partner by ID"""
        query = f'''
            SELECT partner_id, partner_code, partner_name, status
            FROM {self.schema}.{self.partners_table}
            WHERE partner_id = $1
        '''
        results = await self._query(query, [partner_id], "get_partner")
        if not results:
            return None
        return self._row_to_partner(results[0])

    # ====================
    # Rate tables
    # ====================

    async def get_applicable_rate_tables(
        self, partner_id: str, at_time: datetime
    ) -> List[RateTable]:
        """Get active rate tables whose validity window contains at_time (naive = UTC)"""
        at_time = as_utc(at_time)
        query = f'''
            SELECT rate_table_id, partner_id, name, is_active, effective_from, effective_to
            FROM {self.schema}.{self.rate_tables_table}
            WHERE partner_id = $1
              AND is_active = TRUE
              AND effective_from <= $2
              AND (effective_to IS NULL OR effective_to >= $2)
            ORDER BY effective_from DESC
        '''
        results = await self._query(query, [partner_id, at_time], "get_applicable_rate_tables")
        return [self._row_to_rate_table(row) for row in results]

    # ====================
    # Pricing rules
    # ====================

    async def get_rules(
        self,
        rate_table_id: str,
        service_kind: ServiceKind,
        direction: Direction,
    ) -> List[PricingRule]:
        """Get pricing rules of a rate table for a service kind and direction"""
        query = f'''
            SELECT rule_id, rate_table_id, service_kind, direction, destination_prefix,
                   rate_per_unit, currency, minimum_charge, rounding_policy
            FROM {self.schema}.{self.pricing_rules_table}
            WHERE rate_table_id = $1
              AND service_kind = $2
              AND direction = $3
            ORDER BY created_at, rule_id
        '''
        results = await self._query(
            query, [rate_table_id, service_kind.value, direction.value], "get_rules"
        )
        return [self._row_to_pricing_rule(row) for row in results]

    # ====================
    # Row mapping
    # ====================

    def _row_to_partner(self, row: Dict[str, Any]) -> Partner:
        return Partner(
            partner_id=str(row["partner_id"]),
            partner_code=row["partner_code"],
            partner_name=row.get("partner_name"),
            status=row["status"],
        )

    def _row_to_rate_table(self, row: Dict[str, Any]) -> RateTable:
        return RateTable(
            rate_table_id=str(row["rate_table_id"]),
            partner_id=str(row["partner_id"]),
            name=row.get("name"),
            is_active=row.get("is_active", True),
            effective_from=row["effective_from"],
            effective_to=row.get("effective_to"),
        )

    def _row_to_pricing_rule(self, row: Dict[str, Any]) -> PricingRule:
        return PricingRule(
            rule_id=str(row["rule_id"]),
            rate_table_id=str(row["rate_table_id"]),
            service_kind=row["service_kind"],
            direction=row["direction"],
            destination_prefix=row.get("destination_prefix"),
            rate_per_unit=row["rate_per_unit"],
            currency=row["currency"],
            minimum_charge=row.get("minimum_charge"),
            rounding_policy=row.get("rounding_policy"),
        )
