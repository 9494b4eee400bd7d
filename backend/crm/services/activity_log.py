"""
Activity Log — the append-only timeline behind the lead detail page.

System events (lead created, information updated, status changed, payment
received) are appended best-effort after the primary write has committed:
each append runs in its own savepoint, and a failure is logged rather than
surfaced, so the caller's operation still succeeds. Activities staff log by
hand are the primary write of their request and go through record().
"""
import logging

from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction

from crm.exceptions import PersistenceError
from crm.models.lead_activity import LeadActivity

logger = logging.getLogger(__name__)


class ActivityLog:
    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def record(self, lead_id, activity_type: str, notes: str, actor=None) -> LeadActivity:
        """Append an activity; raises PersistenceError if the store rejects it."""
        try:
            with transaction.atomic(using=self.using):
                return LeadActivity.objects.using(self.using).create(
                    lead_id=lead_id,
                    type=activity_type,
                    notes=notes,
                    recorded_by=actor,
                )
        except DatabaseError as e:
            raise PersistenceError(f"Failed to log activity: {e}") from e

    def append(self, lead_id, activity_type: str, notes: str, actor=None) -> LeadActivity | None:
        """Best-effort append. Returns None (and logs) if the write fails."""
        try:
            return self.record(lead_id, activity_type, notes, actor)
        except PersistenceError:
            logger.exception("Could not append %s activity for lead %s", activity_type, lead_id)
            return None

    def timeline(self, lead_id):
        return (
            LeadActivity.objects.using(self.using)
            .filter(lead_id=lead_id)
            .select_related("recorded_by")
            .order_by("-created_at")
        )
