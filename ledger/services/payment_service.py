import logging
from datetime import datetime
from typing import Optional

from django.db import DatabaseError, transaction
from django.utils.translation import gettext

from ledger.models import Payment, PaymentMethod, PaymentStatus, PaymentType, User

from . import decimal_math, payment_status
from .commission import CommissionPolicy, get_commission_policy
from .exceptions import (
    InsufficientFunds,
    InvalidAmountError,
    LedgerError,
    PermissionDenied,
    PersistenceFailure,
)

logger = logging.getLogger("ledger.payment")

CREATABLE_STATUSES = (PaymentStatus.CREATE, PaymentStatus.PAID, PaymentStatus.CANCEL)


def create_payment(
    *,
    user: User,
    payment_type: PaymentType,
    method: str,
    full_amount,
    initiator: Optional[User] = None,
    parent_id: Optional[int] = None,
    status: Optional[str] = None,
    paid_at: Optional[datetime] = None,
    txid: Optional[str] = None,
    address: str = "",
    commission_policy: Optional[CommissionPolicy] = None,
) -> Payment:
    """Create a payment for ``user`` with its commission split.

    ``full_amount`` is always given as a positive magnitude; withdrawals are
    stored negated. The payment is created in ``create`` status. Trusted
    callers may ask for ``paid`` or ``cancel``; the payment is then moved
    through the status machine in the same database transaction, so a paid
    payment always has its Transaction.

    Raises PermissionDenied, InsufficientFunds, ConfigurationError,
    InvalidAmountError or PersistenceFailure.
    """
    logger.info("create - trying create new payment")
    logger.info("create - payment type: %s", payment_type.name)

    try:
        with transaction.atomic():
            full_amount = decimal_math.to_decimal(full_amount)
            _check_request(user, initiator, method, full_amount, status)
            if method == PaymentMethod.WITHDRAW and not _is_enough_money(user, full_amount):
                raise InsufficientFunds()

            policy = commission_policy or get_commission_policy()
            commission = decimal_math.mul(full_amount, policy.percent_for(payment_type))
            amount = decimal_math.sub(full_amount, commission)
            full_amount = decimal_math.mul(full_amount, 1)
            if method == PaymentMethod.WITHDRAW:
                full_amount = decimal_math.negate(full_amount)
                amount = decimal_math.negate(amount)
                commission = decimal_math.negate(commission)

            payment = Payment.objects.create(
                user=user,
                payment_type=payment_type,
                full_amount=full_amount,
                amount=amount,
                commission_amount=commission,
                method=method,
                status=PaymentStatus.CREATE,
                parent_id=parent_id,
                txid=txid,
                address=address or "",
                description=_description(method, address),
            )
            if status == PaymentStatus.PAID:
                payment_status.confirm(payment, paid_at=paid_at)
            elif status == PaymentStatus.CANCEL:
                payment_status.cancel(payment)
    except LedgerError as e:
        logger.error(
            "create - rejected %s payment of %s (%s): %s", payment_type.name, full_amount, method, e
        )
        raise
    except DatabaseError:
        logger.exception(
            "create - can not create new %s payment of %s", payment_type.name, full_amount
        )
        raise PersistenceFailure()

    logger.info("create - payment created. Payment id: %s", payment.pk)
    return payment


def _check_request(user, initiator, method, full_amount, status) -> None:
    if initiator is not None and initiator.pk != user.pk and not initiator.is_admin:
        raise PermissionDenied()
    if method not in PaymentMethod.values:
        raise InvalidAmountError(f"unknown payment method: {method}")
    if status is not None and status not in CREATABLE_STATUSES:
        raise InvalidAmountError(f"payment can not be created as {status}")
    if decimal_math.compare(full_amount, 0) <= 0:
        raise InvalidAmountError("amount must be > 0")
    decimal_math.ensure_storable(full_amount)


def _is_enough_money(user: User, full_amount) -> bool:
    # the stored balance, locked until the payment row is written
    balance = User.objects.select_for_update().only("balance").get(pk=user.pk).balance
    logger.info("create - user balance: %s", balance)
    logger.info("create - payment full amount: %s", full_amount)
    return decimal_math.compare(balance, full_amount) >= 0


def _description(method: str, address: str) -> str:
    if method == PaymentMethod.TOP_UP:
        return gettext("User top up balance")
    if address:
        return gettext("User withdraw balance to %(address)s") % {"address": address}
    return gettext("User withdraw balance")
