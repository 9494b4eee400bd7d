from crm.models.choices import (
    LeadStatus, LeadSource, ReferralStatus, ActivityType, AuditAction,
)
from crm.models.internal_user import InternalUser
from crm.models.partner import Partner
from crm.models.referral import Referral
from crm.models.lead import Lead
from crm.models.lead_activity import LeadActivity
from crm.models.audit_log import AuditLogEntry
from crm.models.client_payment import ClientPayment

__all__ = [
    "LeadStatus", "LeadSource", "ReferralStatus", "ActivityType", "AuditAction",
    "InternalUser", "Partner", "Referral", "Lead",
    "LeadActivity", "AuditLogEntry", "ClientPayment",
]
