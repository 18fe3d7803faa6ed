from rest_framework import serializers

from ledger.models import Payment, Transaction


class PaymentRequestSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    payment_type = serializers.CharField()
    method = serializers.CharField()
    full_amount = serializers.DecimalField(max_digits=20, decimal_places=8)
    initiator_id = serializers.IntegerField(required=False, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, default="")
    txid = serializers.CharField(required=False, allow_null=True, default=None)


class PaymentUpdateSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["confirm", "cancel"])


class TransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transaction
        fields = ["id", "full_amount", "amount", "commission_amount", "old_balance", "new_balance", "created_at"]


class PaymentSerializer(serializers.ModelSerializer):
    payment_type = serializers.CharField(source="payment_type.name")
    transaction = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            "id",
            "user",
            "payment_type",
            "full_amount",
            "amount",
            "commission_amount",
            "method",
            "status",
            "parent_id",
            "txid",
            "address",
            "description",
            "paid_at",
            "created_at",
            "transaction",
        ]

    def get_transaction(self, obj):
        posted = Transaction.objects.filter(payment=obj).first()
        return TransactionSerializer(posted).data if posted else None


def _money():
    return serializers.DecimalField(max_digits=20, decimal_places=8)


class DailyStatisticSerializer(serializers.Serializer):
    date = serializers.DateField()
    full_amount = _money()
    amount = _money()
    commission_amount = _money()


class FinanceStatisticSerializer(serializers.Serializer):
    total_user_balance = _money()
    total_top_up = _money()
    total_withdraw = _money()
    balance_difference = _money()
    total_commission = _money()
    total_referral_payments = _money()
    daily = DailyStatisticSerializer(many=True)
