"""
Referral Linker — turns a referral code typed in by staff into the referral
and partner it belongs to.

Consuming a code moves the referral from "submitted" to "contacted". The move
is a compare-and-set on the status column, so only the first lead opened
against a code changes the referral; later ones link without touching it.
Nothing stops a code being linked to more than one lead.
"""
import logging
import re
from dataclasses import dataclass
from uuid import UUID

from django.db import DEFAULT_DB_ALIAS

from crm.exceptions import NotFoundError, ValidationError
from crm.models.choices import ReferralStatus
from crm.models.referral import Referral
from crm.utils import is_blank, utcnow

logger = logging.getLogger(__name__)

REFERRAL_CODE_FORMAT = re.compile(r"^CRYPT-[A-Z0-9]{6}$", re.I)


@dataclass(frozen=True)
class ReferralLink:
    referral_id: UUID
    partner_id: UUID
    referral_code: str
    consumed: bool  # True if this call moved the referral to "contacted"


def normalize_code(code: str) -> str:
    return code.strip().upper()


class ReferralLinker:
    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def _referrals(self):
        return Referral.objects.using(self.using)

    def resolve(self, code: str) -> ReferralLink:
        """
        Resolve `code` (case-insensitive) and consume the referral.
        Raises NotFoundError("Invalid referral code") when nothing matches.
        """
        if is_blank(code):
            raise NotFoundError("Invalid referral code")
        normalized = normalize_code(code)

        referral = (
            self._referrals()
            .filter(referral_code__iexact=normalized)
            .only("id", "partner", "referral_code")
            .first()
        )
        if referral is None:
            logger.info("Referral code %s did not match any referral", normalized)
            raise NotFoundError("Invalid referral code")

        consumed = bool(
            self._referrals()
            .filter(id=referral.id, status=ReferralStatus.SUBMITTED)
            .update(status=ReferralStatus.CONTACTED, updated_at=utcnow())
        )
        if consumed:
            logger.info("Referral %s consumed (submitted -> contacted)", referral.referral_code)

        return ReferralLink(
            referral_id=referral.id,
            partner_id=referral.partner_id,
            referral_code=referral.referral_code,
            consumed=consumed,
        )

    def lookup(self, code: str) -> Referral:
        """Read-only lookup for staff checking a code before they open a lead."""
        if is_blank(code) or not REFERRAL_CODE_FORMAT.match(code.strip()):
            raise ValidationError("Invalid referral code format. Must be CRYPT-XXXXXX")
        normalized = normalize_code(code)
        referral = (
            self._referrals()
            .select_related("partner")
            .filter(referral_code__iexact=normalized)
            .first()
        )
        if referral is None:
            raise NotFoundError(f'Referral code "{normalized}" not found')
        return referral
