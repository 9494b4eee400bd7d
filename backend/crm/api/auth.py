"""
Auth API — who the bearer token belongs to. The dashboard calls this once at
startup to confirm its token before it starts polling.
"""
from rest_framework.views import APIView

from crm.api.responses import success
from crm.serializers import InternalUserSummarySerializer


class CurrentUserView(APIView):

    def get(self, request):
        return success({"user": InternalUserSummarySerializer(request.user).data})
