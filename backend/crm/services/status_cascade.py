"""
Status Cascade — pushes a lead's pipeline status onto the partner referral it
came from, so the partner sees their referral progress.

The mapping is one-way (referral changes never flow back to the lead) and
deterministic. Lead statuses without an explicit entry ("new", "contacted")
map to "contacted".
"""
import logging

from django.db import DEFAULT_DB_ALIAS

from crm.models.choices import LeadStatus, ReferralStatus
from crm.models.referral import Referral
from crm.utils import utcnow

logger = logging.getLogger(__name__)

LEAD_TO_REFERRAL_STATUS = {
    LeadStatus.CONVERTED: ReferralStatus.WON,
    LeadStatus.LOST: ReferralStatus.LOST,
    LeadStatus.QUALIFIED: ReferralStatus.MEETING_SCHEDULED,
    LeadStatus.PROPOSAL: ReferralStatus.PROPOSAL_SENT,
    LeadStatus.NEGOTIATION: ReferralStatus.NEGOTIATION,
}
DEFAULT_REFERRAL_STATUS = ReferralStatus.CONTACTED


def referral_status_for(lead_status: str) -> ReferralStatus:
    return LEAD_TO_REFERRAL_STATUS.get(lead_status, DEFAULT_REFERRAL_STATUS)


def cascade_to_referral(lead, using: str = DEFAULT_DB_ALIAS) -> ReferralStatus | None:
    """
    Apply the mapped status to the lead's referral.
    Returns the status written, or None when the lead has no referral.
    """
    if not lead.referral_id:
        return None

    referral_status = referral_status_for(lead.status)
    updated = (
        Referral.objects.using(using)
        .filter(id=lead.referral_id)
        .update(status=referral_status, updated_at=utcnow())
    )
    if not updated:
        logger.warning("Lead %s points at missing referral %s", lead.id, lead.referral_id)
        return None

    logger.info(
        "Cascaded lead %s status %s -> referral %s status %s",
        lead.id, lead.status, lead.referral_id, referral_status,
    )
    return referral_status
