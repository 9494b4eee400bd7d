import uuid
from decimal import Decimal
from django.db import models

from crm.models.choices import ReferralStatus


class Referral(models.Model):
    """
    A partner's submission of a prospect, identified by a unique referral code.

    The code is stored upper-case and never changes once the referral exists.
    Staff consume it when they open a lead for the prospect; from then on the
    lead's status cascades onto the referral (see services.status_cascade).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    referral_code = models.CharField(max_length=32, unique=True)
    partner = models.ForeignKey("Partner", on_delete=models.CASCADE, related_name="referrals")

    # Prospect
    prospect_company_name = models.CharField(max_length=200)
    contact_name = models.CharField(max_length=200, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=30, null=True, blank=True)
    industry = models.CharField(max_length=100, null=True, blank=True)
    estimated_deal_value = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    status = models.CharField(
        max_length=30, choices=ReferralStatus.choices, default=ReferralStatus.SUBMITTED
    )

    # Running totals, maintained by services.payments
    total_deal_value = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    total_commission_earned = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "referrals"
        ordering = ["-created_at"]

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._stored_code = instance.__dict__.get("referral_code")
        return instance

    def save(self, *args, **kwargs):
        self.referral_code = (self.referral_code or "").strip().upper()
        stored = getattr(self, "_stored_code", None)
        if stored is not None and stored != self.referral_code:
            raise ValueError(f"Referral code {stored} is immutable")
        super().save(*args, **kwargs)
        self._stored_code = self.referral_code

    def __str__(self):
        return f"{self.referral_code} ({self.status})"
