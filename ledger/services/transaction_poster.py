import logging

from django.db import transaction

from ledger.models import Payment, PaymentMethod, Transaction, User

from . import decimal_math
from .exceptions import InsufficientFunds
from .referral import ReferralCommissionCascade

logger = logging.getLogger("ledger.payment")


def post_transaction(payment: Payment) -> Transaction:
    """Record the balance change of a paid payment and move the user's balance.

    The transaction row and the balance update commit together. The referral
    cascade runs afterwards and can not undo either of them. A withdraw that
    would leave the balance below zero raises InsufficientFunds.
    """
    with transaction.atomic():
        user = User.objects.select_for_update().get(pk=payment.user_id)
        old_balance = user.balance
        new_balance = decimal_math.ensure_storable(decimal_math.add(old_balance, payment.amount))
        if payment.method == PaymentMethod.WITHDRAW and decimal_math.compare(new_balance, 0) < 0:
            logger.error(
                "transaction - payment %s of %s exceeds balance %s", payment.pk, payment.amount, old_balance
            )
            raise InsufficientFunds()
        posted = Transaction.objects.create(
            payment=payment,
            full_amount=payment.full_amount,
            amount=payment.amount,
            commission_amount=payment.commission_amount,
            old_balance=old_balance,
            new_balance=new_balance,
        )
        user.balance = new_balance
        user.save(update_fields=["balance"])

    logger.info(
        "transaction - %s posted for payment %s: %s -> %s",
        posted.pk, payment.pk, old_balance, new_balance,
    )

    ReferralCommissionCascade().handle(posted)
    return posted
