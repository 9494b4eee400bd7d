import uuid
from django.db import models

from crm.models.choices import ActivityType


class LeadActivity(models.Model):
    """
    Append-only timeline entry for a lead.
    Every system event (creation, edits, status changes, payments) and every
    call, email or meeting staff log lands here, and is never edited afterwards.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lead = models.ForeignKey("Lead", on_delete=models.CASCADE, related_name="activities")

    type = models.CharField(max_length=30, choices=ActivityType.choices, db_index=True)
    notes = models.TextField()

    recorded_by = models.ForeignKey(
        "InternalUser", on_delete=models.SET_NULL, null=True, blank=True, related_name="activities"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "lead_activities"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["lead", "-created_at"], name="idx_activity_lead_date"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Lead activities are append-only")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.type} for lead={self.lead_id} at {self.created_at}"
