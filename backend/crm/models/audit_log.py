import uuid
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from crm.models.choices import AuditAction


class AuditLogEntry(models.Model):
    """
    Compliance trail — who changed what, with a snapshot of the new values.
    Written by services.audit, never read back by the lead service.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user_id = models.CharField(max_length=36)
    user_type = models.CharField(max_length=20, default="internal")
    action = models.CharField(max_length=20, choices=AuditAction.choices)

    resource_type = models.CharField(max_length=50)
    resource_id = models.CharField(max_length=36)
    new_values = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "audit_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["resource_type", "resource_id"], name="idx_audit_resource"),
        ]

    def __str__(self):
        return f"{self.action} {self.resource_type}/{self.resource_id} by {self.user_id}"
