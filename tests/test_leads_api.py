import uuid
from unittest import mock

import pytest

from crm.models import Lead, LeadActivity, ReferralStatus


@pytest.fixture
def created_lead(api_client, lead_fields):
    response = api_client.post("/api/leads", lead_fields, format="json")
    assert response.status_code == 201
    return response.json()["data"]["lead"]


def test_create_lead(api_client, lead_fields, internal_user):
    response = api_client.post("/api/leads", lead_fields, format="json")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Lead created successfully"
    assert body["data"]["linked_to_referral"] is False
    lead = body["data"]["lead"]
    assert lead["status"] == "new"
    assert lead["source"] == "internal"
    assert lead["referral_id"] is None
    assert lead["assigned_to"] == str(internal_user.id)
    assert lead["assigned_user"]["name"] == "Amaka Obi"


def test_create_lead_from_referral(api_client, lead_fields, referral):
    response = api_client.post(
        "/api/leads", {**lead_fields, "referral_code": "crypt-abc123"}, format="json",
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["linked_to_referral"] is True
    assert data["lead"]["source"] == "partner"
    assert data["lead"]["referral_code"] == "CRYPT-ABC123"
    assert data["lead"]["referral"]["partner"]["company_name"] == "Ledgerline Consulting"
    referral.refresh_from_db()
    assert referral.status == ReferralStatus.CONTACTED


def test_create_lead_with_unknown_code_is_404(api_client, lead_fields, referral):
    response = api_client.post(
        "/api/leads", {**lead_fields, "referral_code": "CRYPT-NOPE00"}, format="json",
    )

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Invalid referral code"}
    assert not Lead.objects.exists()


def test_create_lead_missing_fields_is_400(api_client):
    response = api_client.post("/api/leads", {"company_name": "Atlas"}, format="json")

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "Required fields" in response.json()["message"]


def test_create_lead_bad_email_is_400(api_client, lead_fields):
    response = api_client.post("/api/leads", {**lead_fields, "email": "nope"}, format="json")

    assert response.status_code == 400
    assert response.json()["message"].startswith("email:")


def test_list_leads(api_client, created_lead):
    response = api_client.get("/api/leads", {"status": "new", "limit": 5})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [l["id"] for l in data["leads"]] == [created_lead["id"]]
    assert data["pagination"] == {"page": 1, "limit": 5, "total": 1, "pages": 1}
    assert data["statistics"]["total"] == 1
    assert data["statistics"]["by_source"] == {"partner": 0, "internal": 1}


def test_list_leads_rejects_unknown_status(api_client, created_lead):
    response = api_client.get("/api/leads", {"status": "won"})

    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid status. Must be one of:")


def test_lead_detail(api_client, created_lead):
    response = api_client.get(f"/api/leads/{created_lead['id']}")

    assert response.status_code == 200
    lead = response.json()["data"]["lead"]
    assert lead["id"] == created_lead["id"]
    assert [a["type"] for a in lead["activities"]] == ["lead_created"]
    assert lead["activities"][0]["recorded_by_name"] == "Amaka Obi"
    assert lead["client_payments"] == []


def test_lead_detail_unknown_is_404(api_client):
    response = api_client.get(f"/api/leads/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Lead not found"}


def test_update_lead(api_client, created_lead):
    response = api_client.put(
        f"/api/leads/{created_lead['id']}",
        {"industry": "Shipping", "referral_code": "crypt-abc123", "source": "partner"},
        format="json",
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Lead updated successfully"
    assert body["data"]["lead"]["industry"] == "Shipping"
    assert body["data"]["lead"]["referral_code"] == "CRYPT-ABC123"
    assert body["data"]["lead"]["source"] == "internal"


def test_update_status(api_client, lead_fields, referral):
    lead = api_client.post(
        "/api/leads", {**lead_fields, "referral_code": referral.referral_code}, format="json",
    ).json()["data"]["lead"]

    response = api_client.put(
        f"/api/leads/{lead['id']}/status", {"status": "negotiation", "notes": "Pricing call"}, format="json",
    )

    assert response.status_code == 200
    assert response.json()["data"]["lead"]["status"] == "negotiation"
    referral.refresh_from_db()
    assert referral.status == ReferralStatus.NEGOTIATION


def test_update_status_requires_valid_status(api_client, created_lead):
    response = api_client.put(f"/api/leads/{created_lead['id']}/status", {}, format="json")
    assert response.status_code == 400
    assert response.json()["message"] == "Status is required"

    response = api_client.put(f"/api/leads/{created_lead['id']}/status", {"status": "won"}, format="json")
    assert response.status_code == 400


def test_log_activity(api_client, created_lead):
    response = api_client.post(
        f"/api/leads/{created_lead['id']}/activities", {"type": "call", "notes": "Intro call"}, format="json",
    )

    assert response.status_code == 201
    activity = response.json()["data"]["activity"]
    assert activity["type"] == "call"
    assert activity["notes"] == "Intro call"
    assert activity["recorded_by_name"] == "Amaka Obi"
    assert LeadActivity.objects.filter(lead_id=created_lead["id"]).count() == 2


def test_log_activity_rejects_system_types(api_client, created_lead):
    response = api_client.post(
        f"/api/leads/{created_lead['id']}/activities",
        {"type": "status_changed", "notes": "sneaky"},
        format="json",
    )

    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid activity type")


def test_unexpected_errors_become_500(api_client):
    with mock.patch("crm.services.leads.LeadStore.list_leads", side_effect=RuntimeError("boom")):
        response = api_client.get("/api/leads")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
