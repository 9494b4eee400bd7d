from decimal import Decimal
from unittest import mock

import pytest
import requests

from crm.dashboard.client import ApiClient, ApiError
from crm.dashboard.view import DashboardView


def _response(status_code=200, body=None):
    response = mock.Mock(status_code=status_code, ok=200 <= status_code < 300)
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


# ─── ApiClient ───────────────────────────────────────────────────────────────

@pytest.fixture
def session():
    return mock.Mock(headers={})


def test_client_sends_token_and_unwraps_data(session):
    session.request.return_value = _response(body={"success": True, "data": {"user": {"id": "u1"}}})
    client = ApiClient("http://crm.local/api/", "internal_user_abc", timeout=3, session=session)

    assert client.current_user() == {"id": "u1"}
    assert session.headers["Authorization"] == "Bearer internal_user_abc"
    session.request.assert_called_once_with(
        "GET", "http://crm.local/api/auth/me", params=None, json=None, timeout=3,
    )


def test_client_raises_on_http_error(session):
    session.request.return_value = _response(403, {"success": False, "message": "Internal team access required"})
    client = ApiClient("http://crm.local/api", "t", session=session)

    with pytest.raises(ApiError) as exc_info:
        client.dashboard_metrics()
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Internal team access required"


def test_client_raises_on_non_json_error(session):
    session.request.return_value = _response(502)
    client = ApiClient("http://crm.local/api", "t", session=session)

    with pytest.raises(ApiError, match="HTTP error 502"):
        client.list_leads()


def test_client_raises_on_unsuccessful_envelope(session):
    session.request.return_value = _response(200, {"success": False, "message": "nope"})
    client = ApiClient("http://crm.local/api", "t", session=session)

    with pytest.raises(ApiError, match="nope"):
        client.list_leads()


def test_client_wraps_network_failures(session):
    session.request.side_effect = requests.ConnectionError("refused")
    client = ApiClient("http://crm.local/api", "t", session=session)

    with pytest.raises(ApiError, match="refused"):
        client.current_user()


def test_client_record_payment_payload(session):
    session.request.return_value = _response(201, {"success": True, "data": {"payment": {}}})
    client = ApiClient("http://crm.local/api", "t", session=session)

    client.record_payment("lead-1", Decimal("250.00"))

    session.request.assert_called_once_with(
        "POST", "http://crm.local/api/payments", params=None,
        json={"lead_id": "lead-1", "amount": "250.00", "payment_method": "bank_transfer"},
        timeout=10,
    )


# ─── DashboardView ───────────────────────────────────────────────────────────

METRICS = {
    "performance": {"total_leads": 12, "active_referrals": 4, "converted_leads": 3},
    "financial": {"total_commission": 1250.5},
}
LEADS = {"leads": [
    {"company_name": "Harbor Freight Logistics", "contact_name": "Chidi Okafor", "status": "new",
     "source": "partner", "referral_code": "CRYPT-ABC123", "estimated_value": 1000},
]}


@pytest.fixture
def client():
    client = mock.Mock(spec=ApiClient)
    client.current_user.return_value = {"name": "Amaka Obi", "email": "amaka@example.com"}
    client.dashboard_metrics.return_value = METRICS
    client.list_leads.return_value = LEADS
    return client


@pytest.fixture
def screen():
    return []


@pytest.fixture
def view(client, screen):
    return DashboardView(client, write=screen.append)


def test_refresh_authenticates_first(view, client, screen):
    assert view.refresh() is True

    client.current_user.assert_called_once_with()
    client.dashboard_metrics.assert_called_once_with()
    client.list_leads.assert_called_once_with(page=1, limit=10)
    assert view.summary() == {
        "Total leads": 12,
        "Active referrals": 4,
        "Converted leads": 3,
        "Partner payouts": "1,250.50",
    }
    assert "Harbor Freight Logistics" in screen[-1]
    assert "CRYPT-ABC123" in screen[-1]


def test_failed_authentication_fetches_nothing(view, client, screen):
    client.current_user.side_effect = ApiError("Invalid internal user token", 401)

    assert view.refresh() is False

    client.dashboard_metrics.assert_not_called()
    client.list_leads.assert_not_called()
    assert "ERROR: Authentication failed: Invalid internal user token" in screen[-1]


def test_refresh_survives_api_errors(view, client, screen):
    view.refresh()
    client.list_leads.side_effect = ApiError("HTTP error 500 for GET /leads", 500)

    assert view.refresh() is False

    assert view.leads == LEADS["leads"]
    assert view.metrics == METRICS
    assert "Failed to load leads data" in screen[-1]


def test_record_payment_repolls(view, client):
    view.refresh()
    client.record_payment.return_value = {"commission_calculated": 50.0}

    assert view.record_payment("lead-1", "1000") is True

    client.record_payment.assert_called_once_with("lead-1", Decimal("1000"))
    assert client.dashboard_metrics.call_count == 2
    assert view.notice == "Payment recorded successfully (commission 50.00)"


@pytest.mark.parametrize("lead_id,amount,message", [
    (None, "10", "Please select a lead"),
    ("lead-1", "0", "Please enter a valid amount"),
    ("lead-1", "ten", "Please enter a valid amount"),
])
def test_record_payment_validates_locally(view, client, lead_id, amount, message):
    assert view.record_payment(lead_id, amount) is False
    assert view.error == message
    client.record_payment.assert_not_called()


def test_record_payment_failure_does_not_repoll(view, client, screen):
    view.refresh()
    client.record_payment.side_effect = ApiError("Lead not found", 404)

    assert view.record_payment("lead-1", "10") is False

    assert client.dashboard_metrics.call_count == 1
    assert "ERROR: Lead not found" in screen[-1]


def test_attach_referral_code(view, client):
    view.refresh()

    assert view.attach_referral_code("lead-1", " crypt-abc123 ") is True

    client.update_lead.assert_called_once_with("lead-1", {"referral_code": "CRYPT-ABC123"})
    assert client.list_leads.call_count == 2


def test_attach_referral_code_requires_input(view, client):
    assert view.attach_referral_code("lead-1", "  ") is False
    assert view.error == "Please fill in all fields"
    client.update_lead.assert_not_called()
