from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from crm.authentication import internal_token_for
from crm.models import InternalUser, Partner, Referral
from crm.services.leads import LeadStore


@pytest.fixture
def internal_user(db):
    return InternalUser.objects.create(name="Amaka Obi", email="amaka@example.com", role="manager")


@pytest.fixture
def other_user(db):
    return InternalUser.objects.create(name="Tunde Bello", email="tunde@example.com")


@pytest.fixture
def partner(db):
    return Partner.objects.create(
        company_name="Ledgerline Consulting", contact_name="Grace Eze",
        email="grace@ledgerline.example", bank_verified=True,
    )


@pytest.fixture
def referral(partner):
    return Referral.objects.create(
        referral_code="CRYPT-ABC123",
        partner=partner,
        prospect_company_name="Harbor Freight Logistics",
        estimated_deal_value=Decimal("120000.00"),
    )


@pytest.fixture
def lead_fields():
    return {
        "company_name": "Harbor Freight Logistics",
        "contact_name": "Chidi Okafor",
        "email": "chidi@harborfreight.example",
        "phone": "+234-800-0001",
        "industry": "Logistics",
    }


@pytest.fixture
def store(db):
    return LeadStore()


@pytest.fixture
def api_client(internal_user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {internal_token_for(internal_user)}")
    return client
