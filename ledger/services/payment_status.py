"""Payment status transitions.

``create`` is the only non-terminal state. Every transition is a single
conditional UPDATE on the current status, so two actors racing on the same
payment (an admin and the reconciliation job) can not both win.
"""
import logging
from datetime import datetime
from typing import Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from ledger.models import Payment, PaymentStatus

from .exceptions import PersistenceFailure
from .transaction_poster import post_transaction

logger = logging.getLogger("ledger.payment")

TRANSITIONS = {
    PaymentStatus.CREATE: {PaymentStatus.PAID, PaymentStatus.CANCEL, PaymentStatus.EXPIRED},
    PaymentStatus.PAID: set(),
    PaymentStatus.CANCEL: set(),
    PaymentStatus.EXPIRED: set(),
}


def can_transition(source: str, target: str) -> bool:
    return target in TRANSITIONS.get(source, set())


def is_closed(payment: Payment) -> bool:
    return not TRANSITIONS.get(payment.status)


def _sources_of(target: str):
    return [source for source, targets in TRANSITIONS.items() if target in targets]


def _transition(payment: Payment, target: str, **fields) -> bool:
    updated = Payment.objects.filter(pk=payment.pk, status__in=_sources_of(target)).update(
        status=target, **fields
    )
    payment.refresh_from_db()
    if not updated:
        logger.info("update - payment %s already closed (%s)", payment.pk, payment.status)
        return False
    logger.info("update - payment %s is %s", payment.pk, target)
    return True


def confirm(payment: Payment, paid_at: Optional[datetime] = None) -> bool:
    """Mark the payment paid and post its transaction. False if it was already closed.

    Raises PersistenceFailure if storage fails, or InsufficientFunds if a
    withdraw would take the balance below zero; the payment then stays open.
    """
    try:
        with transaction.atomic():
            if not _transition(payment, PaymentStatus.PAID, paid_at=paid_at or timezone.now()):
                return False
            post_transaction(payment)
    except DatabaseError:
        logger.exception("update - can not confirm payment %s", payment.pk)
        raise PersistenceFailure()
    return True


def cancel(payment: Payment) -> bool:
    try:
        with transaction.atomic():
            return _transition(payment, PaymentStatus.CANCEL)
    except DatabaseError:
        logger.exception("update - can not cancel payment %s", payment.pk)
        raise PersistenceFailure()
