"""Finance figures and the balance reconciliation check."""
from decimal import Decimal
from typing import Dict, List

from django.db.models import DecimalField, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Abs, Coalesce, TruncDate

from ledger.models import MONEY, Payment, PaymentMethod, PaymentStatus, PaymentType, Transaction, User

from . import decimal_math

ZERO = Decimal("0")


def _total(expression):
    return Coalesce(Sum(expression), Value(ZERO), output_field=DecimalField(**MONEY))


def sum_paid(method: str, field: str) -> Decimal:
    paid = Payment.objects.filter(status=PaymentStatus.PAID, method=method)
    return paid.aggregate(total=_total(field))["total"]


def daily_breakdown() -> List[Dict]:
    rows = (
        Payment.objects.filter(paid_at__isnull=False)
        .annotate(date=TruncDate("paid_at"))
        .values("date")
        .annotate(
            full_amount=_total("full_amount"),
            amount=_total("amount"),
            commission_amount=_total(Abs("commission_amount")),
        )
        .order_by("-date")
    )
    return list(rows)


def finance_statistics() -> Dict:
    top_up = sum_paid(PaymentMethod.TOP_UP, "amount")
    withdraw = sum_paid(PaymentMethod.WITHDRAW, "full_amount")
    paid = Payment.objects.filter(paid_at__isnull=False)
    referral_payouts = Payment.objects.filter(
        status=PaymentStatus.PAID, payment_type__name=PaymentType.REFERRAL_COMMISSION
    )
    return {
        "total_user_balance": User.objects.filter(balance__gt=0).aggregate(total=_total("balance"))["total"],
        "total_top_up": top_up,
        "total_withdraw": withdraw,
        "balance_difference": decimal_math.sub(top_up, decimal_math.magnitude(withdraw)),
        "total_commission": paid.aggregate(total=_total(Abs("commission_amount")))["total"],
        "total_referral_payments": referral_payouts.aggregate(total=_total("full_amount"))["total"],
        "daily": daily_breakdown(),
    }


def find_balance_mismatches() -> List[Dict]:
    """Users whose balance is not the new_balance of their latest transaction."""
    latest = Transaction.objects.filter(payment__user=OuterRef("pk")).order_by("-pk")
    users = User.objects.annotate(
        last_balance=Subquery(latest.values("new_balance")[:1], output_field=DecimalField(**MONEY))
    ).filter(last_balance__isnull=False)

    mismatches = []
    for user in users:
        if decimal_math.compare(user.balance, user.last_balance) != 0:
            mismatches.append(
                {"user_id": user.pk, "balance": user.balance, "transactions_balance": user.last_balance}
            )
    return mismatches
