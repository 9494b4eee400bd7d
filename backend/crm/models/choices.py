"""
Closed enumerations for lead status, lead source, referral status and
activity type. Raw strings from the API are parsed once, at the service
boundary, through parse_choice().
"""
from django.db import models

from crm.exceptions import ValidationError


class LeadStatus(models.TextChoices):
    NEW = "new", "New"
    CONTACTED = "contacted", "Contacted"
    QUALIFIED = "qualified", "Qualified"
    PROPOSAL = "proposal", "Proposal"
    NEGOTIATION = "negotiation", "Negotiation"
    CONVERTED = "converted", "Converted"
    LOST = "lost", "Lost"


class LeadSource(models.TextChoices):
    PARTNER = "partner", "Partner"
    INTERNAL = "internal", "Internal"


class ReferralStatus(models.TextChoices):
    SUBMITTED = "submitted", "Submitted"
    CONTACTED = "contacted", "Contacted"
    MEETING_SCHEDULED = "meeting_scheduled", "Meeting scheduled"
    PROPOSAL_SENT = "proposal_sent", "Proposal sent"
    NEGOTIATION = "negotiation", "Negotiation"
    WON = "won", "Won"
    LOST = "lost", "Lost"


class ActivityType(models.TextChoices):
    # Written by the system
    LEAD_CREATED = "lead_created", "Lead created"
    INFORMATION_UPDATED = "information_updated", "Information updated"
    STATUS_CHANGED = "status_changed", "Status changed"
    PAYMENT_RECEIVED = "payment_received", "Payment received"
    # Logged by staff
    CALL = "call", "Call"
    EMAIL = "email", "Email"
    MEETING = "meeting", "Meeting"
    NOTE = "note", "Note"
    DEMO = "demo", "Demo"
    PROPOSAL_SENT = "proposal_sent", "Proposal sent"
    FOLLOW_UP = "follow_up", "Follow-up"


MANUAL_ACTIVITY_TYPES = (
    ActivityType.CALL,
    ActivityType.EMAIL,
    ActivityType.MEETING,
    ActivityType.NOTE,
    ActivityType.DEMO,
    ActivityType.PROPOSAL_SENT,
    ActivityType.FOLLOW_UP,
)


class AuditAction(models.TextChoices):
    CREATE = "create", "Create"
    UPDATE = "update", "Update"


def parse_choice(choices, value, label: str, allowed=None):
    """
    Convert a raw string into a member of `choices`.

    `allowed` narrows the accepted members (e.g. manual activity types only).
    Raises ValidationError naming every accepted value.
    """
    allowed = tuple(allowed) if allowed is not None else tuple(choices)
    try:
        member = choices(value)
    except ValueError:
        member = None
    if member is None or member not in allowed:
        raise ValidationError(
            f"Invalid {label}. Must be one of: {', '.join(m.value for m in allowed)}"
        )
    return member
