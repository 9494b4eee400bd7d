"""
Lead API — create, list, inspect and update leads for the internal dashboard.

Lead statuses:
  new → contacted → qualified → proposal → negotiation → converted
  lost (from anywhere)

Leads opened from a partner referral code carry source="partner"; their
status changes cascade onto the referral so the partner can follow along.
"""
from rest_framework import status
from rest_framework.views import APIView

from crm.api.responses import store_alias, success
from crm.serializers import (
    ActivityCreateSerializer, LeadDetailSerializer, LeadSerializer,
    LeadStatusSerializer, LeadWriteSerializer, LeadActivitySerializer,
)
from crm.services.leads import LeadFilters, LeadStore


def _lead_store() -> LeadStore:
    return LeadStore(using=store_alias())


class LeadListCreateView(APIView):
    """List/search leads and create new leads."""

    def get(self, request):
        """List leads with filtering, search, pagination and pipeline statistics."""
        params = request.query_params
        filters = LeadFilters(
            status=params.get("status"),
            source=params.get("source"),
            assigned_to=params.get("assigned_to"),
            search=params.get("search"),
        )
        result = _lead_store().list_leads(filters, page=params.get("page"), limit=params.get("limit"))

        return success({
            "leads": LeadSerializer(result.leads, many=True).data,
            "pagination": {
                "page": result.page,
                "limit": result.limit,
                "total": result.total,
                "pages": result.pages,
            },
            "statistics": result.statistics,
        })

    def post(self, request):
        """Create a lead, optionally linked to a partner referral code."""
        serializer = LeadWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        created = _lead_store().create(serializer.validated_data, actor=request.user)

        return success(
            {
                "lead": LeadSerializer(created.lead).data,
                "linked_to_referral": created.linked_to_referral,
            },
            message="Lead created successfully",
            status=status.HTTP_201_CREATED,
        )


class LeadDetailView(APIView):
    """Full lead detail and update."""

    def get(self, request, lead_id):
        lead = _lead_store().get(lead_id)
        return success({"lead": LeadDetailSerializer(lead).data})

    def put(self, request, lead_id):
        """Update lead fields. id, created_at and the referral linkage cannot be changed here."""
        serializer = LeadWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        lead = _lead_store().update(lead_id, serializer.validated_data, actor=request.user)
        return success({"lead": LeadSerializer(lead).data}, message="Lead updated successfully")


class LeadStatusView(APIView):
    """Move a lead through the pipeline (cascades onto its referral)."""

    def put(self, request, lead_id):
        serializer = LeadStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        lead = _lead_store().update_status(
            lead_id, data.get("status"), data.get("notes"), actor=request.user,
        )
        return success({"lead": LeadSerializer(lead).data}, message="Lead status updated successfully")


class LeadActivityView(APIView):
    """Log a call, email, meeting or note on a lead's timeline."""

    def post(self, request, lead_id):
        serializer = ActivityCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        activity = _lead_store().log_activity(
            lead_id, data.get("type"), data.get("notes"), actor=request.user,
        )
        return success(
            {"activity": LeadActivitySerializer(activity).data},
            message="Activity logged successfully",
            status=status.HTTP_201_CREATED,
        )
