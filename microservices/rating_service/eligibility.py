"""
Partner Eligibility Check

Confirms the owning partner exists and is chargeable before any
rate table lookup happens.
"""

import logging

from .models import Partner, PartnerStatus
from .protocols import (
    PartnerNotActiveError,
    PartnerNotFoundError,
    RateRepositoryProtocol,
)

logger = logging.getLogger(__name__)

CHARGEABLE_STATUS = PartnerStatus.ACTIVE


async def check_partner_eligibility(
    repository: RateRepositoryProtocol, partner_id: str
) -> Partner:
    """
    Fetch the partner and make sure it can be charged.

    Args:
        repository: Rate repository
        partner_id: Owning partner identifier

    Returns:
        The eligible partner

    Raises:
        PartnerNotFoundError: Partner does not exist
        PartnerNotActiveError: Partner status is not ACTIVE
    """
    partner = await repository.get_partner(partner_id)
    if partner is None:
        raise PartnerNotFoundError(f"Partner not found: {partner_id}", partner_id=partner_id)

    if partner.status != CHARGEABLE_STATUS:
        status = partner.status.value if hasattr(partner.status, "value") else str(partner.status)
        logger.info(f"Partner {partner.partner_code} not chargeable (status={status})")
        raise PartnerNotActiveError(
            f"Partner {partner.partner_code} is not {CHARGEABLE_STATUS.value}. Current status: {status}",
            partner_code=partner.partner_code,
            status=partner.status,
        )

    return partner


__all__ = ["check_partner_eligibility", "CHARGEABLE_STATUS"]
