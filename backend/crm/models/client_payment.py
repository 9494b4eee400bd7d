import uuid
from decimal import Decimal
from django.db import models


class ClientPayment(models.Model):
    """
    A payment received from a client. When the lead came through a partner,
    the partner earns commission_calculated on it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lead = models.ForeignKey(
        "Lead", on_delete=models.SET_NULL, null=True, blank=True, related_name="client_payments"
    )
    referral = models.ForeignKey(
        "Referral", on_delete=models.SET_NULL, null=True, blank=True, related_name="client_payments"
    )

    amount = models.DecimalField(max_digits=15, decimal_places=2)
    commission_calculated = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    payment_date = models.DateField()
    payment_method = models.CharField(max_length=50, default="bank_transfer")
    transaction_reference = models.CharField(max_length=100)
    status = models.CharField(max_length=20, default="confirmed")  # confirmed, reversed

    recorded_by = models.ForeignKey(
        "InternalUser", on_delete=models.SET_NULL, null=True, blank=True, related_name="recorded_payments"
    )
    notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "client_payments"
        ordering = ["-payment_date", "-created_at"]

    def __str__(self):
        return f"{self.amount} on {self.payment_date} ({self.status})"
