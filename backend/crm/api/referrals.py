"""
Referral API — lets staff check a partner's referral code before they open a
lead with it. Looking a code up never consumes it.
"""
from rest_framework.views import APIView

from crm.api.responses import store_alias, success
from crm.serializers import ReferralDetailSerializer
from crm.services.referrals import ReferralLinker


class ReferralCodeView(APIView):
    """Referral (and its partner) for a CRYPT-XXXXXX code."""

    def get(self, request, code):
        referral = ReferralLinker(using=store_alias()).lookup(code)
        return success({"referral": ReferralDetailSerializer(referral).data})
