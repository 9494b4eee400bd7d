"""
DRF serializers for API request/response validation.
Separates API contract from DB models.

Request serializers only check shape and coerce types; required-field and
enum rules are enforced by the services, which raise the domain errors.
"""
from rest_framework import serializers
from crm.models import (
    InternalUser, Partner, Referral, Lead, LeadActivity, ClientPayment,
)


# ─── Nested summaries ────────────────────────────────────────────────────────

class InternalUserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = InternalUser
        fields = ['id', 'name', 'email', 'role']


class PartnerSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Partner
        fields = ['id', 'company_name', 'contact_name', 'email', 'phone']


class ReferralSummarySerializer(serializers.ModelSerializer):
    partner = PartnerSummarySerializer(read_only=True)

    class Meta:
        model = Referral
        fields = ['id', 'referral_code', 'status', 'partner']


# ─── Lead Serializers ────────────────────────────────────────────────────────

LEAD_FIELDS = [
    'id', 'company_name', 'contact_name', 'email', 'phone',
    'industry', 'erp_system', 'implementation_timeline', 'estimated_value',
    'status', 'source', 'referral_id', 'referral_code', 'referral',
    'assigned_to', 'assigned_user', 'last_contact', 'created_at', 'updated_at',
]


class LeadSerializer(serializers.ModelSerializer):
    """Lead with its assignee and referral → partner joined in."""
    referral_id = serializers.UUIDField(read_only=True, allow_null=True)
    referral = ReferralSummarySerializer(read_only=True)
    assigned_to = serializers.UUIDField(source='assigned_to_id', read_only=True, allow_null=True)
    assigned_user = InternalUserSummarySerializer(source='assigned_to', read_only=True)

    class Meta:
        model = Lead
        fields = LEAD_FIELDS


class LeadActivitySerializer(serializers.ModelSerializer):
    recorded_by = serializers.UUIDField(source='recorded_by_id', read_only=True, allow_null=True)
    recorded_by_name = serializers.CharField(source='recorded_by.name', read_only=True, default=None)

    class Meta:
        model = LeadActivity
        fields = ['id', 'lead_id', 'type', 'notes', 'recorded_by', 'recorded_by_name', 'created_at']


class ClientPaymentSerializer(serializers.ModelSerializer):
    lead_id = serializers.UUIDField(read_only=True, allow_null=True)
    referral_id = serializers.UUIDField(read_only=True, allow_null=True)
    recorded_by = serializers.UUIDField(source='recorded_by_id', read_only=True, allow_null=True)

    class Meta:
        model = ClientPayment
        fields = [
            'id', 'lead_id', 'referral_id', 'amount', 'commission_calculated',
            'payment_date', 'payment_method', 'transaction_reference', 'status',
            'recorded_by', 'notes', 'created_at',
        ]


class LeadDetailSerializer(LeadSerializer):
    """Lead detail: adds the activity timeline and client payments."""
    activities = LeadActivitySerializer(many=True, read_only=True)
    client_payments = ClientPaymentSerializer(many=True, read_only=True)

    class Meta(LeadSerializer.Meta):
        fields = LEAD_FIELDS + ['activities', 'client_payments']


class ReferralDetailSerializer(serializers.ModelSerializer):
    partner = PartnerSummarySerializer(read_only=True)

    class Meta:
        model = Referral
        fields = [
            'id', 'referral_code', 'prospect_company_name', 'contact_name', 'email',
            'phone', 'industry', 'estimated_deal_value', 'status', 'partner',
            'total_deal_value', 'total_commission_earned', 'created_at', 'updated_at',
        ]


# ─── Request Serializers ─────────────────────────────────────────────────────

def _optional_text(max_length=None):
    return serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=max_length,
    )


class LeadWriteSerializer(serializers.Serializer):
    """Payload for POST /leads and PUT /leads/<id>. Unknown keys are dropped."""
    company_name = _optional_text(200)
    contact_name = _optional_text(200)
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    phone = _optional_text(30)
    industry = _optional_text(100)
    erp_system = _optional_text(100)
    implementation_timeline = _optional_text(100)
    estimated_value = serializers.DecimalField(
        max_digits=15, decimal_places=2, required=False, allow_null=True,
    )
    referral_code = _optional_text(32)
    assigned_to = serializers.UUIDField(required=False, allow_null=True)
    status = _optional_text()
    last_contact = serializers.DateTimeField(required=False, allow_null=True)


class LeadStatusSerializer(serializers.Serializer):
    status = _optional_text()
    notes = _optional_text()


class ActivityCreateSerializer(serializers.Serializer):
    type = _optional_text()
    notes = _optional_text()


class PaymentCreateSerializer(serializers.Serializer):
    lead_id = serializers.UUIDField(required=False, allow_null=True)
    referral_id = serializers.UUIDField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    payment_date = serializers.DateField(required=False, allow_null=True)
    payment_method = _optional_text(50)
    transaction_reference = _optional_text(100)
    notes = _optional_text()
