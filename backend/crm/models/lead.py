import uuid
from django.db import models

from crm.models.choices import LeadSource, LeadStatus


class Lead(models.Model):
    """
    A sales opportunity with a prospective client.
    This is the central entity — activities, payments and audit entries link to a lead.

    Invariants kept by services.leads:
      source == "partner"  ⇔  referral is set
      referral_code is always upper-case
    Leads are never deleted; "converted" and "lost" are end states of the record.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Prospect info
    company_name = models.CharField(max_length=200)
    contact_name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=30)
    industry = models.CharField(max_length=100, null=True, blank=True)
    erp_system = models.CharField(max_length=100, null=True, blank=True)
    implementation_timeline = models.CharField(max_length=100, null=True, blank=True)
    estimated_value = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    # Pipeline state
    status = models.CharField(max_length=20, choices=LeadStatus.choices, default=LeadStatus.NEW)
    #   new → contacted → qualified → proposal → negotiation → converted
    #   lost may be reached from any state
    source = models.CharField(max_length=20, choices=LeadSource.choices, default=LeadSource.INTERNAL)

    referral = models.ForeignKey(
        "Referral", on_delete=models.SET_NULL, null=True, blank=True, related_name="leads"
    )
    referral_code = models.CharField(max_length=32, null=True, blank=True)

    assigned_to = models.ForeignKey(
        "InternalUser", on_delete=models.SET_NULL, null=True, blank=True, related_name="assigned_leads"
    )

    last_contact = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "leads"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="idx_lead_status"),
            models.Index(fields=["source"], name="idx_lead_source"),
            models.Index(fields=["-created_at"], name="idx_lead_created"),
        ]

    def save(self, *args, **kwargs):
        if self.referral_code:
            self.referral_code = self.referral_code.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.company_name} / {self.contact_name} ({self.status})"
