"""
Executive dashboard metrics — financial, pipeline and partner roll-ups for
the internal dashboard's summary cards.
"""
from datetime import timedelta
from decimal import Decimal

from django.db import DEFAULT_DB_ALIAS
from django.db.models import Avg, Count, Q, Sum

from crm.models.choices import LeadStatus, ReferralStatus
from crm.models.client_payment import ClientPayment
from crm.models.lead import Lead
from crm.models.partner import Partner
from crm.models.referral import Referral
from crm.utils import utcnow

CLOSED_REFERRAL_STATUSES = (ReferralStatus.WON, ReferralStatus.LOST)
RECENT_WINDOW = timedelta(days=30)
TOP_PERFORMERS = 5


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def build_dashboard_metrics(using: str = DEFAULT_DB_ALIAS) -> dict:
    since = utcnow() - RECENT_WINDOW
    zero = Decimal("0.00")

    payments = ClientPayment.objects.using(using).filter(status="confirmed").aggregate(
        revenue=Sum("amount"),
        commission=Sum("commission_calculated"),
        recent=Count("id", filter=Q(payment_date__gte=since.date())),
    )
    revenue = payments["revenue"] or zero
    commission = payments["commission"] or zero

    referrals = Referral.objects.using(using).aggregate(
        total=Count("id"),
        active=Count("id", filter=~Q(status__in=CLOSED_REFERRAL_STATUSES)),
        won=Count("id", filter=Q(status=ReferralStatus.WON)),
        average_deal=Avg("total_deal_value"),
        recent=Count("id", filter=Q(created_at__gte=since)),
    )

    leads = Lead.objects.using(using).aggregate(
        total=Count("id"),
        converted=Count("id", filter=Q(status=LeadStatus.CONVERTED)),
    )

    partners = Partner.objects.using(using).aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        verified=Count("id", filter=Q(bank_verified=True)),
        recent=Count("id", filter=Q(created_at__gte=since)),
    )
    top_performers = [
        {
            "company_name": p.company_name,
            "total_commissions": p.total_commissions_earned,
            "is_verified": p.bank_verified,
        }
        for p in Partner.objects.using(using)
        .filter(total_commissions_earned__gt=0)
        .order_by("-total_commissions_earned")[:TOP_PERFORMERS]
    ]

    return {
        "financial": {
            "total_revenue": revenue,
            "total_commission": commission,
            "net_revenue": revenue - commission,
            "average_deal_size": Decimal(str(referrals["average_deal"] or 0)).quantize(Decimal("0.01")),
        },
        "performance": {
            "total_referrals": referrals["total"],
            "active_referrals": referrals["active"],
            "conversion_rate": _percent(referrals["won"], referrals["total"]),
            "total_leads": leads["total"],
            "converted_leads": leads["converted"],
            "lead_conversion_rate": _percent(leads["converted"], leads["total"]),
        },
        "partners": {
            "total_partners": partners["total"],
            "active_partners": partners["active"],
            "verified_partners": partners["verified"],
            "top_performers": top_performers,
        },
        "recent_activity": {
            "referrals_last_30_days": referrals["recent"],
            "payments_last_30_days": payments["recent"],
            "new_partners_last_30_days": partners["recent"],
        },
    }
