import pytest

from crm.exceptions import NotFoundError, ValidationError
from crm.models import Referral, ReferralStatus
from crm.services.referrals import ReferralLinker


@pytest.fixture
def linker(db):
    return ReferralLinker()


def test_resolve_matches_case_insensitively_and_consumes(linker, referral):
    link = linker.resolve("  crypt-abc123 ")

    assert link.referral_id == referral.id
    assert link.partner_id == referral.partner_id
    assert link.referral_code == "CRYPT-ABC123"
    assert link.consumed is True
    referral.refresh_from_db()
    assert referral.status == ReferralStatus.CONTACTED


def test_second_resolve_does_not_move_status(linker, referral):
    linker.resolve(referral.referral_code)
    Referral.objects.filter(id=referral.id).update(status=ReferralStatus.PROPOSAL_SENT)

    link = linker.resolve(referral.referral_code)

    assert link.consumed is False
    referral.refresh_from_db()
    assert referral.status == ReferralStatus.PROPOSAL_SENT


@pytest.mark.parametrize("code", ["CRYPT-NOPE00", "", None])
def test_resolve_unknown_code(linker, referral, code):
    with pytest.raises(NotFoundError, match="Invalid referral code"):
        linker.resolve(code)
    referral.refresh_from_db()
    assert referral.status == ReferralStatus.SUBMITTED


def test_lookup_is_read_only(linker, referral):
    found = linker.lookup("crypt-abc123")

    assert found.id == referral.id
    assert found.partner.company_name == "Ledgerline Consulting"
    referral.refresh_from_db()
    assert referral.status == ReferralStatus.SUBMITTED


@pytest.mark.parametrize("code", ["ABC123", "CRYPT-ABC12", "CRYPT-ABC1234", "CRYPT_ABC123"])
def test_lookup_rejects_malformed_codes(linker, code):
    with pytest.raises(ValidationError, match="CRYPT-XXXXXX"):
        linker.lookup(code)


def test_lookup_unknown_code(linker, referral):
    with pytest.raises(NotFoundError, match='"CRYPT-ZZZ999" not found'):
        linker.lookup("crypt-zzz999")


def test_referral_code_is_stored_upper_case_and_immutable(partner):
    referral = Referral.objects.create(
        referral_code="crypt-low123", partner=partner, prospect_company_name="Sunrise Foods",
    )
    assert referral.referral_code == "CRYPT-LOW123"

    stored = Referral.objects.get(id=referral.id)
    stored.prospect_company_name = "Sunrise Foods Ltd"
    stored.save()

    stored.referral_code = "CRYPT-NEW123"
    with pytest.raises(ValueError):
        stored.save()
