from decimal import Decimal

from crm.models import Partner
from crm.services.metrics import build_dashboard_metrics
from crm.services.payments import PaymentLedger


def test_empty_dashboard(db):
    metrics = build_dashboard_metrics()

    assert metrics["financial"]["total_revenue"] == Decimal("0.00")
    assert metrics["financial"]["average_deal_size"] == Decimal("0.00")
    assert metrics["performance"]["conversion_rate"] == 0.0
    assert metrics["performance"]["total_leads"] == 0
    assert metrics["partners"]["top_performers"] == []


def test_dashboard_rollups(store, internal_user, lead_fields, referral, partner):
    Partner.objects.create(company_name="Quiet Partner", is_active=False)
    referred = store.create({**lead_fields, "referral_code": referral.referral_code}, actor=internal_user).lead
    store.create({**lead_fields, "company_name": "Atlas Retail"}, actor=internal_user)
    store.update_status(referred.id, "converted", None, actor=internal_user)
    PaymentLedger().record_payment({"lead_id": referred.id, "amount": "10000"}, actor=internal_user)

    metrics = build_dashboard_metrics()

    assert metrics["financial"] == {
        "total_revenue": Decimal("10000.00"),
        "total_commission": Decimal("500.00"),
        "net_revenue": Decimal("9500.00"),
        "average_deal_size": Decimal("10000.00"),
    }
    performance = metrics["performance"]
    assert performance["total_referrals"] == 1
    assert performance["active_referrals"] == 0
    assert performance["conversion_rate"] == 100.0
    assert performance["total_leads"] == 2
    assert performance["converted_leads"] == 1
    assert performance["lead_conversion_rate"] == 50.0

    partners = metrics["partners"]
    assert partners["total_partners"] == 2
    assert partners["active_partners"] == 1
    assert partners["verified_partners"] == 1
    assert partners["top_performers"] == [{
        "company_name": "Ledgerline Consulting",
        "total_commissions": Decimal("500.00"),
        "is_verified": True,
    }]
    assert metrics["recent_activity"] == {
        "referrals_last_30_days": 1,
        "payments_last_30_days": 1,
        "new_partners_last_30_days": 2,
    }
