"""
Payment Ledger — records client payments and the partner commission they earn.

The commission is COMMISSION_RATE (5% by default) of the amount, rounded
half-up to cents. The payment row and the running totals on the referral and
its partner are written in one transaction; the lead timeline entry and audit
entry follow best-effort.
"""
import logging
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.db.models import F

from crm.exceptions import NotFoundError, PersistenceError, ValidationError
from crm.models.choices import ActivityType, AuditAction
from crm.models.client_payment import ClientPayment
from crm.models.lead import Lead
from crm.models.partner import Partner
from crm.models.referral import Referral
from crm.services.activity_log import ActivityLog
from crm.services.audit import AuditSink
from crm.utils import is_blank, model_snapshot, parse_uuid, utcnow

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass
class RecordedPayment:
    payment: ClientPayment
    commission_rate: Decimal


def calculate_commission(amount: Decimal, rate: Decimal) -> Decimal:
    return (amount * rate).quantize(CENTS, rounding=ROUND_HALF_UP)


def _parse_amount(value) -> Decimal:
    if isinstance(value, bool) or is_blank(value):
        raise ValidationError("Valid payment amount is required and must be a positive number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("Valid payment amount is required and must be a positive number") from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Valid payment amount is required and must be a positive number")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class PaymentLedger:
    def __init__(
        self,
        using: str = DEFAULT_DB_ALIAS,
        activity_log: ActivityLog | None = None,
        audit: AuditSink | None = None,
        commission_rate: Decimal | None = None,
    ):
        self.using = using
        self.activity_log = activity_log or ActivityLog(using)
        self.audit = audit or AuditSink(using)
        self.commission_rate = commission_rate if commission_rate is not None else settings.COMMISSION_RATE

    def record_payment(self, fields: dict, actor) -> RecordedPayment:
        amount = _parse_amount(fields.get("amount"))
        lead_id = fields.get("lead_id")
        referral_id = fields.get("referral_id")
        if is_blank(lead_id) and is_blank(referral_id):
            raise ValidationError("Either referral_id or lead_id is required")

        lead = None
        if not is_blank(lead_id):
            lead = Lead.objects.using(self.using).filter(id=parse_uuid(lead_id, "lead_id")).first()
            if lead is None:
                raise NotFoundError("Lead not found")

        referral = None
        if not is_blank(referral_id):
            referral = Referral.objects.using(self.using).filter(
                id=parse_uuid(referral_id, "referral_id")
            ).first()
            if referral is None:
                raise NotFoundError("Referral not found")
        elif lead is not None and lead.referral_id:
            referral = Referral.objects.using(self.using).filter(id=lead.referral_id).first()

        # Commission is only owed when a partner referred the client
        commission = calculate_commission(amount, self.commission_rate) if referral else Decimal("0.00")
        reference = fields.get("transaction_reference") or f"PAY-{int(time.time() * 1000)}"
        subject = (referral.prospect_company_name if referral else None) or (
            lead.company_name if lead else "Unknown Company"
        )

        try:
            with transaction.atomic(using=self.using):
                payment = ClientPayment.objects.using(self.using).create(
                    lead=lead,
                    referral=referral,
                    amount=amount,
                    commission_calculated=commission,
                    payment_date=fields.get("payment_date") or utcnow().date(),
                    payment_method=fields.get("payment_method") or "bank_transfer",
                    transaction_reference=reference,
                    status="confirmed",
                    recorded_by=actor,
                    notes=fields.get("notes") or f"Payment recorded for {subject}",
                )
                if referral is not None:
                    Referral.objects.using(self.using).filter(id=referral.id).update(
                        total_deal_value=F("total_deal_value") + amount,
                        total_commission_earned=F("total_commission_earned") + commission,
                        updated_at=utcnow(),
                    )
                    Partner.objects.using(self.using).filter(id=referral.partner_id).update(
                        total_commissions_earned=F("total_commissions_earned") + commission,
                    )
        except DatabaseError as e:
            raise PersistenceError(f"Failed to record payment: {e}") from e

        logger.info(
            "Payment %s recorded: %s (commission %s) for %s", payment.id, amount, commission, subject,
        )

        if lead is not None:
            self.activity_log.append(
                lead.id,
                ActivityType.PAYMENT_RECEIVED,
                f"Payment of {amount:,.2f} recorded (Ref: {reference})",
                actor,
            )
        self.audit.record(actor, AuditAction.CREATE, "client_payments", payment.id, model_snapshot(payment))

        return RecordedPayment(payment=payment, commission_rate=self.commission_rate)

    def list_payments(self, lead_id=None, limit: int = 100):
        queryset = (
            ClientPayment.objects.using(self.using)
            .select_related("lead", "referral__partner")
            .order_by("-payment_date", "-created_at")
        )
        if not is_blank(lead_id):
            queryset = queryset.filter(lead_id=parse_uuid(lead_id, "lead_id"))
        return list(queryset[:limit])
