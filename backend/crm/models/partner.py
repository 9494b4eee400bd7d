import uuid
from decimal import Decimal
from django.db import models


class Partner(models.Model):
    """A referral partner. Partner onboarding lives elsewhere; this service only reads and totals them."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company_name = models.CharField(max_length=200)
    contact_name = models.CharField(max_length=200, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=30, null=True, blank=True)

    is_active = models.BooleanField(default=True)
    bank_verified = models.BooleanField(default=False)
    total_commissions_earned = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "partners"
        ordering = ["company_name"]

    def __str__(self):
        return self.company_name
