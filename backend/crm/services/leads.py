"""
Lead Store — lead lifecycle operations behind the internal API.

  create()        validate, link a referral (optional), insert, log
  list_leads()    filter + search + page, with statistics over ALL leads
  get()           detail with assignee, referral/partner, timeline, payments
  update()        field edits (id/created_at/referral linkage are immutable);
                  a status edit cascades like update_status()
  update_status() status transition + cascade onto the linked referral
  log_activity()  manual timeline entry (call, email, meeting, ...)

Primary writes run inside transaction.atomic on the injected database alias;
a referral code is consumed in the SAME transaction as the lead insert, so a
failed insert never leaves a referral "contacted" with no lead behind it.
Activity and audit appends happen after commit and are best-effort.
"""
import logging
import math
from dataclasses import dataclass, field

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.db.models import Count, Prefetch, Q

from crm.exceptions import NotFoundError, PersistenceError, ValidationError
from crm.models.choices import (
    MANUAL_ACTIVITY_TYPES, ActivityType, AuditAction, LeadSource, LeadStatus, parse_choice,
)
from crm.models.client_payment import ClientPayment
from crm.models.internal_user import InternalUser
from crm.models.lead import Lead
from crm.models.lead_activity import LeadActivity
from crm.services.activity_log import ActivityLog
from crm.services.audit import AuditSink
from crm.services.referrals import ReferralLinker, normalize_code
from crm.services.status_cascade import cascade_to_referral
from crm.utils import is_blank, model_snapshot, parse_uuid, positive_int, utcnow

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("company_name", "contact_name", "email", "phone")
OPTIONAL_FIELDS = ("industry", "erp_system", "implementation_timeline", "estimated_value")

# Never writable through update(): identity, creation time and referral
# linkage (source is derived from the linkage, so it goes with it).
IMMUTABLE_FIELDS = ("id", "created_at", "referral_id", "referral", "source")
UPDATABLE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS + (
    "status", "referral_code", "assigned_to", "last_contact",
)

NO_FILTER = ("", "all")


@dataclass
class LeadFilters:
    status: str | None = None
    source: str | None = None
    assigned_to: str | None = None
    search: str | None = None


@dataclass
class LeadPage:
    leads: list
    page: int
    limit: int
    total: int
    statistics: dict = field(default_factory=dict)

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass
class CreatedLead:
    lead: Lead
    linked_to_referral: bool


def _is_unfiltered(value) -> bool:
    return value is None or str(value).strip().lower() in NO_FILTER


class LeadStore:
    def __init__(
        self,
        using: str = DEFAULT_DB_ALIAS,
        referrals: ReferralLinker | None = None,
        activity_log: ActivityLog | None = None,
        audit: AuditSink | None = None,
    ):
        self.using = using
        self.referrals = referrals or ReferralLinker(using)
        self.activity_log = activity_log or ActivityLog(using)
        self.audit = audit or AuditSink(using)

    # ─── Query helpers ───────────────────────────────────────────────────

    def _leads(self):
        return Lead.objects.using(self.using)

    def _joined(self):
        return self._leads().select_related("assigned_to", "referral__partner")

    def _joined_lead(self, lead_id) -> Lead:
        return self._joined().get(id=lead_id)

    def _resolve_assignee(self, value) -> InternalUser | None:
        if is_blank(value):
            return None
        user_id = parse_uuid(value, "assigned_to")
        user = InternalUser.objects.using(self.using).filter(id=user_id).first()
        if user is None:
            raise ValidationError(f"Unknown assignee: {user_id}")
        return user

    def _locked(self, lead_id) -> Lead:
        lead = self._leads().select_for_update().filter(id=lead_id).first()
        if lead is None:
            raise NotFoundError("Lead not found")
        return lead

    # ─── Create ──────────────────────────────────────────────────────────

    def create(self, fields: dict, actor: InternalUser) -> CreatedLead:
        if any(is_blank(fields.get(name)) for name in REQUIRED_FIELDS):
            raise ValidationError(f"Required fields: {', '.join(REQUIRED_FIELDS)}")

        assignee = self._resolve_assignee(fields.get("assigned_to")) or actor
        referral_code = fields.get("referral_code")
        values = {name: fields.get(name) for name in REQUIRED_FIELDS + OPTIONAL_FIELDS}

        try:
            with transaction.atomic(using=self.using):
                link = None
                if not is_blank(referral_code):
                    link = self.referrals.resolve(referral_code)

                lead = self._leads().create(
                    **values,
                    status=LeadStatus.NEW,
                    source=LeadSource.PARTNER if link else LeadSource.INTERNAL,
                    referral_id=link.referral_id if link else None,
                    referral_code=link.referral_code if link else None,
                    assigned_to=assignee,
                )
        except DatabaseError as e:
            raise PersistenceError(f"Failed to create lead: {e}") from e

        logger.info(
            "Lead %s created for %s (source=%s)", lead.id, lead.company_name, lead.source,
        )

        self.activity_log.append(
            lead.id,
            ActivityType.LEAD_CREATED,
            f"Lead created from {'partner referral' if link else 'internal source'}",
            actor,
        )
        self.audit.record(actor, AuditAction.CREATE, "leads", lead.id, model_snapshot(lead))

        return CreatedLead(lead=self._joined_lead(lead.id), linked_to_referral=link is not None)

    # ─── Read ────────────────────────────────────────────────────────────

    def list_leads(self, filters: LeadFilters | None = None, page=None, limit=None) -> LeadPage:
        filters = filters or LeadFilters()
        page = positive_int(page, "page", 1)
        limit = min(
            positive_int(limit, "limit", settings.LEADS_DEFAULT_PAGE_SIZE),
            settings.LEADS_MAX_PAGE_SIZE,
        )

        queryset = self._joined().order_by("-created_at")

        if not _is_unfiltered(filters.status):
            queryset = queryset.filter(status=parse_choice(LeadStatus, filters.status, "status"))
        if not _is_unfiltered(filters.source):
            queryset = queryset.filter(source=parse_choice(LeadSource, filters.source, "source"))
        if not _is_unfiltered(filters.assigned_to):
            queryset = queryset.filter(assigned_to_id=parse_uuid(filters.assigned_to, "assigned_to"))

        search = (filters.search or "").strip()
        if search:
            queryset = queryset.filter(
                Q(company_name__icontains=search) |
                Q(contact_name__icontains=search) |
                Q(email__icontains=search)
            )

        total = queryset.count()
        offset = (page - 1) * limit
        leads = list(queryset[offset:offset + limit])

        return LeadPage(
            leads=leads, page=page, limit=limit, total=total, statistics=self.statistics(),
        )

    def statistics(self) -> dict:
        """Counts over every lead, with every status and source bucket present."""
        by_status = {choice.value: 0 for choice in LeadStatus}
        for row in self._leads().values("status").annotate(count=Count("id")).order_by():
            if row["status"] in by_status:
                by_status[row["status"]] = row["count"]

        by_source = {choice.value: 0 for choice in LeadSource}
        for row in self._leads().values("source").annotate(count=Count("id")).order_by():
            if row["source"] in by_source:
                by_source[row["source"]] = row["count"]

        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_source": by_source,
        }

    def get(self, lead_id) -> Lead:
        lead = (
            self._joined()
            .prefetch_related(
                Prefetch(
                    "activities",
                    queryset=LeadActivity.objects.using(self.using)
                    .select_related("recorded_by")
                    .order_by("-created_at"),
                ),
                Prefetch(
                    "client_payments",
                    queryset=ClientPayment.objects.using(self.using)
                    .order_by("-payment_date", "-created_at"),
                ),
            )
            .filter(id=lead_id)
            .first()
        )
        if lead is None:
            raise NotFoundError("Lead not found")
        return lead

    # ─── Update ──────────────────────────────────────────────────────────

    def update(self, lead_id, fields: dict, actor: InternalUser) -> Lead:
        changes = {
            name: value for name, value in fields.items()
            if name in UPDATABLE_FIELDS and name not in IMMUTABLE_FIELDS
        }

        for name in REQUIRED_FIELDS:
            if name in changes and is_blank(changes[name]):
                raise ValidationError(f"{name} cannot be blank")
        if "status" in changes:
            changes["status"] = parse_choice(LeadStatus, changes["status"], "status")
        if "assigned_to" in changes:
            changes["assigned_to"] = self._resolve_assignee(changes["assigned_to"])
        if "referral_code" in changes and is_blank(changes["referral_code"]):
            changes["referral_code"] = None

        try:
            with transaction.atomic(using=self.using):
                lead = self._locked(lead_id)
                old_status = lead.status
                if lead.referral_id and "referral_code" in changes:
                    # The copy must keep matching the linked referral
                    if normalize_code(changes["referral_code"] or "") != lead.referral_code:
                        raise ValidationError(
                            "referral_code cannot be changed on a lead linked to a partner referral"
                        )
                    del changes["referral_code"]

                for name, value in changes.items():
                    setattr(lead, name, value)
                status_changed = "status" in changes and changes["status"] != old_status
                if status_changed and "last_contact" not in changes:
                    lead.last_contact = utcnow()
                lead.save()
                if status_changed:
                    cascade_to_referral(lead, self.using)
        except DatabaseError as e:
            raise PersistenceError(f"Failed to update lead: {e}") from e

        logger.info("Lead %s updated (%s)", lead.id, ", ".join(sorted(changes)) or "no fields")

        self.activity_log.append(
            lead.id, ActivityType.INFORMATION_UPDATED, "Lead information updated", actor,
        )
        if status_changed:
            self.activity_log.append(
                lead.id,
                ActivityType.STATUS_CHANGED,
                f"Status changed from {old_status} to {lead.status}",
                actor,
            )
        self.audit.record(actor, AuditAction.UPDATE, "leads", lead.id, model_snapshot(lead))

        return self._joined_lead(lead.id)

    def update_status(self, lead_id, status, notes: str | None, actor: InternalUser) -> Lead:
        if is_blank(status):
            raise ValidationError("Status is required")
        new_status = parse_choice(LeadStatus, status, "status")

        try:
            with transaction.atomic(using=self.using):
                lead = self._locked(lead_id)
                old_status = lead.status
                lead.status = new_status
                lead.last_contact = utcnow()
                lead.save(update_fields=["status", "last_contact", "updated_at"])
                referral_status = cascade_to_referral(lead, self.using)
        except DatabaseError as e:
            raise PersistenceError(f"Failed to update lead status: {e}") from e

        logger.info(
            "Lead %s status %s -> %s (referral -> %s)",
            lead.id, old_status, new_status, referral_status or "n/a",
        )

        self.activity_log.append(
            lead.id,
            ActivityType.STATUS_CHANGED,
            notes if not is_blank(notes) else f"Status changed from {old_status} to {new_status.value}",
            actor,
        )
        self.audit.record(actor, AuditAction.UPDATE, "leads", lead.id, model_snapshot(lead))

        return self._joined_lead(lead.id)

    # ─── Activities ──────────────────────────────────────────────────────

    def log_activity(self, lead_id, activity_type, notes, actor: InternalUser) -> LeadActivity:
        if is_blank(activity_type) or is_blank(notes):
            raise ValidationError("Activity type and notes are required")
        activity_type = parse_choice(
            ActivityType, activity_type, "activity type", allowed=MANUAL_ACTIVITY_TYPES,
        )

        try:
            with transaction.atomic(using=self.using):
                if not self._leads().filter(id=lead_id).exists():
                    raise NotFoundError("Lead not found")
                activity = self.activity_log.record(lead_id, activity_type, notes.strip(), actor)
                now = utcnow()
                self._leads().filter(id=lead_id).update(last_contact=now, updated_at=now)
        except DatabaseError as e:
            raise PersistenceError(f"Failed to log activity: {e}") from e

        logger.info("Logged %s activity on lead %s", activity_type.value, lead_id)
        return activity
