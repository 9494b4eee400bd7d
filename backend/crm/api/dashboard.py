"""
Internal dashboard API — the executive summary behind the dashboard's
metric cards.
"""
from rest_framework.views import APIView

from crm.api.responses import store_alias, success
from crm.services.metrics import build_dashboard_metrics
from crm.utils import utcnow


class DashboardMetricsView(APIView):

    def get(self, request):
        return success({
            "metrics": build_dashboard_metrics(using=store_alias()),
            "generated_at": utcnow(),
        })
