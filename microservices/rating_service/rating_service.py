"""
Rating Service - Business Logic Layer

Rates usage records (voice calls, SMS) against partner rate tables:
- Record validation (required fields, kind-specific quantities)
- Partner eligibility (exists and ACTIVE)
- Rate resolution (effective-dated rate table, longest-prefix pricing rule)
- Charge calculation (minute rounding, minimum charge, 4 decimal places)

Every record ends RATED or FAILED with a reason; one record's failure never
aborts the batch.
"""

import asyncio
import logging
import time
from collections import Counter, defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Union

from core.config import RatingConfig

from .charge_calculator import calculate_charge, quantize_amount
from .eligibility import check_partner_eligibility
from .models import (
    BatchRevenue,
    BatchStatistics,
    CurrencyAmount,
    ErrorCount,
    FailureCategory,
    RatingBatchResult,
    RatingResult,
    RatingStatus,
    RecordState,
    RoundingPolicy,
    ServiceInfo,
    ServiceKind,
    UsageRecord,
)
from .protocols import (
    BatchValidationError,
    RateRepositoryProtocol,
    RatingServiceError,
    RepositoryError,
    RepositoryUnavailableError,
)
from .rate_resolver import RateResolver
from .routes_registry import SERVICE_METADATA
from .validator import validate_usage_record

logger = logging.getLogger(__name__)


class RatingService:
    """
    Rating Service - Core business logic

    Sequences validation, partner eligibility, rate resolution and charge
    calculation for each usage record and aggregates batch results.
    """

    CAPABILITIES = SERVICE_METADATA["capabilities"]

    def __init__(
        self,
        repository: RateRepositoryProtocol,
        config: Optional[RatingConfig] = None,
    ):
        """
        Initialize rating service with dependencies.

        Args:
            repository: Rate repository for partner / rate table lookups
            config: Rating settings (loaded from environment if not provided)
        """
        self.repository = repository
        self.config = config or RatingConfig.from_env()
        self.resolver = RateResolver(repository, tie_policy=self.config.rule_tie_policy)

    # ====================
    # Single record
    # ====================

    async def rate_record(self, record: UsageRecord) -> UsageRecord:
        """
        Rate one usage record and annotate it with the result.

        Raises:
            RepositoryUnavailableError: Repository cannot be reached
        """
        result = await self._rate(record)
        self._annotate(record, result)
        return record

    async def _rate(self, record: UsageRecord) -> RatingResult:
        """Run the rating pipeline for one record without touching the record"""
        label = record.record_id or "<unidentified>"
        state = RecordState.VALIDATING
        logger.debug(f"Record {label}: {RecordState.RECEIVED.value} -> {state.value}")

        try:
            validate_usage_record(record)

            partner = await check_partner_eligibility(self.repository, record.partner_id)
            state = RecordState.ELIGIBLE
            logger.debug(f"Record {label}: -> {state.value} (partner {partner.partner_code})")

            rate_table, rule = await self.resolver.resolve(partner, record)
            state = RecordState.RESOLVED
            logger.debug(f"Record {label}: -> {state.value} (rule {rule.rule_id})")

            calculation = calculate_charge(record, rule)

        except RepositoryUnavailableError:
            raise
        except RepositoryError as e:
            logger.error(f"Record {label}: repository error while {state.value}: {e}", exc_info=True)
            return RatingResult.failed(f"Rate repository error: {e}", FailureCategory.REPOSITORY)
        except RatingServiceError as e:
            logger.info(f"Record {label}: failed while {state.value}: {e}")
            return RatingResult.failed(str(e), e.category or FailureCategory.VALIDATION)
        except Exception as e:
            if state == RecordState.RESOLVED:
                logger.error(f"Record {label}: charge calculation failed: {e}", exc_info=True)
                return RatingResult.failed(f"Charge calculation failed: {e}", FailureCategory.CALCULATION)
            # Before RESOLVED only repository reads raise non-domain errors
            logger.error(f"Record {label}: repository error while {state.value}: {e}", exc_info=True)
            return RatingResult.failed(f"Rate repository error: {e}", FailureCategory.REPOSITORY)

        return RatingResult(
            status=RatingStatus.RATED,
            charge=calculation.amount,
            currency=calculation.currency,
            rate_applied=calculation.rate_applied,
            billable_quantity=calculation.billable_quantity,
            minimum_applied=calculation.minimum_applied,
            rule_id=rule.rule_id,
            rate_table_id=rate_table.rate_table_id,
        )

    @staticmethod
    def _annotate(record: UsageRecord, result: RatingResult) -> None:
        record.result = result
        record.state = RecordState.RATED if result.status == RatingStatus.RATED else RecordState.FAILED

    # ====================
    # Batches
    # ====================

    async def rate_records(
        self, records: Union[UsageRecord, Sequence[UsageRecord]]
    ) -> RatingBatchResult:
        """
        Rate a single record or an ordered collection of records.

        Records are rated concurrently; results are attached only once the
        whole batch is done, in input order.

        Raises:
            BatchValidationError: Empty batch or more than max_batch_size records
            RepositoryUnavailableError: Repository cannot be reached
        """
        if isinstance(records, UsageRecord):
            records = [records]
        records = list(records)

        if not records:
            raise BatchValidationError("No usage records provided", provided=0)
        if len(records) > self.config.max_batch_size:
            raise BatchValidationError(
                f"Batch size exceeds maximum limit of {self.config.max_batch_size} records",
                provided=len(records),
            )

        started = time.monotonic()
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def rate_bounded(record: UsageRecord) -> RatingResult:
            async with semaphore:
                return await self._rate(record)

        tasks = [asyncio.create_task(rate_bounded(record)) for record in records]
        try:
            results = await asyncio.gather(*tasks)
        except RepositoryUnavailableError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error(f"Rate repository unavailable, batch of {len(records)} records aborted")
            raise

        for record, result in zip(records, results):
            self._annotate(record, result)

        processing_time_ms = int((time.monotonic() - started) * 1000)
        batch = self.summarize(records, processing_time_ms=processing_time_ms)
        logger.info(
            f"Batch {batch.batch_id}: {batch.statistics.rated} rated, "
            f"{batch.statistics.failed} failed in {processing_time_ms} ms"
        )
        return batch

    @staticmethod
    def summarize(records: List[UsageRecord], processing_time_ms: int = 0) -> RatingBatchResult:
        """Build batch statistics, per-currency revenue and grouped errors"""
        total = len(records)
        rated = [r for r in records if r.result and r.result.status == RatingStatus.RATED]
        failed = [r for r in records if r.result and r.result.status == RatingStatus.FAILED]

        by_service_kind: Dict[str, int] = Counter(r.service_kind or "UNKNOWN" for r in records)

        revenue: Dict[str, Decimal] = defaultdict(Decimal)
        for record in rated:
            revenue[record.result.currency] += record.result.charge

        errors = Counter(r.result.failure_reason or "Unknown error" for r in failed)

        success_rate = (len(rated) / total * 100) if total else 0.0

        return RatingBatchResult(
            batch_id=f"BATCH-{int(time.time() * 1000)}",
            processed_count=total,
            processing_time_ms=processing_time_ms,
            statistics=BatchStatistics(
                total=total,
                rated=len(rated),
                failed=len(failed),
                success_rate=f"{success_rate:.2f}%",
                by_service_kind=dict(by_service_kind),
            ),
            revenue=BatchRevenue(
                by_currency=[
                    CurrencyAmount(currency=currency, amount=quantize_amount(amount))
                    for currency, amount in sorted(revenue.items())
                ]
            ),
            errors=[ErrorCount(message=message, count=count) for message, count in errors.most_common()],
            records=records,
        )

    # ====================
    # Service info
    # ====================

    def get_service_info(self) -> ServiceInfo:
        """Liveness / capability probe"""
        return ServiceInfo(
            service=self.config.service_name,
            version=self.config.version,
            description="Usage rating and charge calculation for interconnect and roaming traffic",
            capabilities=list(self.CAPABILITIES),
            supported_service_kinds=list(ServiceKind),
            supported_rounding_policies=list(RoundingPolicy),
            max_batch_size=self.config.max_batch_size,
            metadata={"rule_tie_policy": self.config.rule_tie_policy},
        )


__all__ = ["RatingService"]
