from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ledger.models import Payment
from ledger.services import payment_status
from ledger.services.exceptions import LedgerError
from ledger.services.payment_service import create_payment
from ledger.services.payment_validator import PaymentValidationError, validate_payment_request_data
from ledger.services.reporting import finance_statistics

from .serializers import (
    FinanceStatisticSerializer,
    PaymentRequestSerializer,
    PaymentSerializer,
    PaymentUpdateSerializer,
)


class PaymentView(APIView):
    def post(self, request):
        serializer = PaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            resolved = validate_payment_request_data(data)
        except PaymentValidationError as e:
            return Response({"detail": str(e)}, status=e.status_code)

        try:
            payment = create_payment(
                user=resolved["user"],
                payment_type=resolved["payment_type"],
                method=data["method"],
                full_amount=data["full_amount"],
                initiator=resolved["initiator"],
                address=data["address"],
                txid=data["txid"],
            )
        except LedgerError as e:
            body = {"detail": "Can't create payment"}
            if e.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
                body["reason"] = str(e)
            return Response(body, status=e.status_code)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PaymentDetailView(APIView):
    def _get_payment(self, pk):
        return Payment.objects.select_related("payment_type").filter(pk=pk).first()

    def get(self, request, pk):
        payment = self._get_payment(pk)
        if payment is None:
            return Response({"detail": "payment not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(PaymentSerializer(payment).data)

    def put(self, request, pk):
        payment = self._get_payment(pk)
        if payment is None:
            return Response({"detail": "payment not found"}, status=status.HTTP_404_NOT_FOUND)

        serializer = PaymentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        action = serializer.validated_data["action"]

        try:
            if action == "confirm":
                changed = payment_status.confirm(payment)
            else:
                changed = payment_status.cancel(payment)
        except LedgerError as e:
            body = {"detail": "Can't update payment"}
            if e.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
                body["reason"] = str(e)
            return Response(body, status=e.status_code)

        if not changed:
            return Response({"detail": "Payment already closed"}, status=status.HTTP_409_CONFLICT)
        return Response({"detail": "Success!", "payment": PaymentSerializer(payment).data})


class FinanceStatisticView(APIView):
    def get(self, request):
        return Response(FinanceStatisticSerializer(finance_statistics()).data)
