"""
Audit Sink — append-only compliance trail of who created or changed what.

Entries are best-effort, like activities: a failed audit write is logged and
never fails the request that caused it. With AUDIT_DELIVERY = "queue" the
entry is handed to django-q instead, whose ORM broker keeps it in the
database until a cluster worker writes it, so it survives a worker restart.
"""
import json
import logging

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction

from crm.models.audit_log import AuditLogEntry

logger = logging.getLogger(__name__)


def write_audit_entry(entry: dict, using: str = DEFAULT_DB_ALIAS) -> str:
    """Persist one audit entry. Also the django-q task target."""
    row = AuditLogEntry.objects.using(using).create(**entry)
    return str(row.id)


class AuditSink:
    def __init__(self, using: str = DEFAULT_DB_ALIAS, delivery: str | None = None):
        self.using = using
        self.delivery = delivery

    def record(self, actor, action: str, resource_type: str, resource_id, new_values: dict) -> None:
        entry = {
            "user_id": str(actor.id) if actor else "",
            "user_type": "internal",
            "action": action,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            # Snapshot as plain JSON so it pickles cleanly onto the queue
            "new_values": json.loads(json.dumps(new_values, cls=DjangoJSONEncoder)),
        }

        if (self.delivery or settings.AUDIT_DELIVERY) == "queue":
            try:
                from django_q.tasks import async_task
                async_task(
                    "crm.services.audit.write_audit_entry",
                    entry,
                    self.using,
                    task_name=f"audit_{resource_type}_{resource_id}",
                )
            except Exception:
                logger.exception(
                    "Could not queue audit entry %s %s/%s", action, resource_type, resource_id,
                )
            return

        try:
            with transaction.atomic(using=self.using):
                write_audit_entry(entry, self.using)
        except DatabaseError:
            logger.exception(
                "Could not write audit entry %s %s/%s", action, resource_type, resource_id,
            )
