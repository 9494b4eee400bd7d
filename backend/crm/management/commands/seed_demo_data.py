"""
Seed demo data — internal users, partners with referral codes, and leads at
various pipeline stages, some opened from referral codes and some paid.

Usage:
    python manage.py seed_demo_data
    python manage.py seed_demo_data --reset  # Clear CRM tables and re-seed

Leads go through the LeadStore and PaymentLedger so the referral cascade,
activity timeline and commission totals look exactly as they would live.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from crm.authentication import internal_token_for
from crm.models import (
    AuditLogEntry, ClientPayment, InternalUser, Lead, LeadActivity, Partner, Referral,
)
from crm.services.leads import LeadStore
from crm.services.payments import PaymentLedger


USERS = [
    {"name": "Amaka Obi", "email": "amaka@partnercrm.example", "role": "manager"},
    {"name": "Tunde Bello", "email": "tunde@partnercrm.example", "role": "sales"},
]

PARTNERS = [
    {
        "company_name": "Ledgerline Consulting",
        "contact_name": "Grace Eze",
        "email": "grace@ledgerline.example",
        "bank_verified": True,
        "referrals": [
            ("CRYPT-LL0001", "Harbor Freight Logistics", "Logistics", Decimal("120000.00")),
            ("CRYPT-LL0002", "Sunrise Foods", "FMCG", Decimal("45000.00")),
        ],
    },
    {
        "company_name": "Northwind ERP Partners",
        "contact_name": "Ibrahim Musa",
        "email": "ibrahim@northwind.example",
        "bank_verified": False,
        "referrals": [
            ("CRYPT-NW0001", "Cobalt Mining Co", "Mining", Decimal("300000.00")),
        ],
    },
]

# (company, contact, email, phone, referral code or None, target status, payment)
LEADS = [
    ("Harbor Freight Logistics", "Chidi Okafor", "chidi@harborfreight.example", "+234-800-0001",
     "CRYPT-LL0001", "converted", Decimal("25000.00")),
    ("Sunrise Foods", "Bola Ade", "bola@sunrisefoods.example", "+234-800-0002",
     "crypt-ll0002", "proposal", None),
    ("Cobalt Mining Co", "Yusuf Danjuma", "yusuf@cobalt.example", "+234-800-0003",
     "CRYPT-NW0001", "qualified", None),
    ("Atlas Retail", "Ngozi Umeh", "ngozi@atlasretail.example", "+234-800-0004",
     None, "contacted", None),
    ("Keystone Pharma", "Segun Ajayi", "segun@keystone.example", "+234-800-0005",
     None, "new", None),
]


class Command(BaseCommand):
    help = "Seed the CRM with demo users, partners, referrals and leads"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset", action="store_true",
            help="Delete all CRM rows before seeding",
        )

    def handle(self, *args, **options):
        if options["reset"]:
            with transaction.atomic():
                for model in (AuditLogEntry, ClientPayment, LeadActivity, Lead, Referral, Partner, InternalUser):
                    model.objects.all().delete()
            self.stdout.write(self.style.WARNING("Cleared CRM tables"))

        users = []
        for data in USERS:
            user, _ = InternalUser.objects.get_or_create(email=data["email"], defaults=data)
            users.append(user)

        for data in PARTNERS:
            fields = {key: value for key, value in data.items() if key != "referrals"}
            partner, _ = Partner.objects.get_or_create(company_name=fields["company_name"], defaults=fields)
            for code, prospect, industry, value in data["referrals"]:
                Referral.objects.get_or_create(
                    referral_code=code,
                    defaults={
                        "partner": partner,
                        "prospect_company_name": prospect,
                        "industry": industry,
                        "estimated_deal_value": value,
                    },
                )

        store = LeadStore()
        ledger = PaymentLedger()
        created = 0
        for company, contact, email, phone, code, target_status, payment in LEADS:
            if Lead.objects.filter(company_name=company).exists():
                continue
            actor = users[created % len(users)]
            lead = store.create(
                {
                    "company_name": company,
                    "contact_name": contact,
                    "email": email,
                    "phone": phone,
                    "referral_code": code,
                    "erp_system": "SAP Business One",
                },
                actor=actor,
            ).lead
            if target_status != "new":
                store.update_status(lead.id, target_status, None, actor=actor)
            if payment:
                ledger.record_payment({"lead_id": lead.id, "amount": payment}, actor=actor)
            created += 1

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(users)} users, {len(PARTNERS)} partners and {created} new leads"
        ))
        for user in users:
            self.stdout.write(f"  {user.email}: Bearer {internal_token_for(user)}")
