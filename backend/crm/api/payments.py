"""
Payments API — record client payments from the dashboard and list them.
Recording a payment credits the referring partner's commission.
"""
from rest_framework import status
from rest_framework.views import APIView

from crm.api.responses import store_alias, success
from crm.serializers import ClientPaymentSerializer, PaymentCreateSerializer
from crm.services.payments import PaymentLedger
from crm.utils import positive_int

MAX_PAYMENTS = 500


class PaymentListCreateView(APIView):

    def get(self, request):
        limit = min(positive_int(request.query_params.get("limit"), "limit", 100), MAX_PAYMENTS)
        payments = PaymentLedger(using=store_alias()).list_payments(
            lead_id=request.query_params.get("lead_id"), limit=limit,
        )
        return success({"payments": ClientPaymentSerializer(payments, many=True).data})

    def post(self, request):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        recorded = PaymentLedger(using=store_alias()).record_payment(
            serializer.validated_data, actor=request.user,
        )
        payment = recorded.payment
        return success(
            {
                "payment": ClientPaymentSerializer(payment).data,
                "commission_calculated": payment.commission_calculated,
                "commission_rate": f"{(recorded.commission_rate * 100).normalize():f}%",
            },
            message="Payment recorded successfully",
            status=status.HTTP_201_CREATED,
        )
