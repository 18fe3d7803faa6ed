import logging

from django.db import transaction as db_transaction

from ledger.models import Payment, PaymentMethod, PaymentType, Transaction

from . import decimal_math, payment_service
from .commission import CommissionPolicy, get_commission_policy, resolve_payment_type

logger = logging.getLogger("ledger.payment")


class ReferralCommissionCascade:
    """Pays the referrer a share of the commission charged on a transaction.

    Runs right after a transaction is posted. Nothing raised here reaches the
    caller: every rejection and failure is logged and the posted transaction
    stands.
    """

    def __init__(self, commission_policy: CommissionPolicy = None):
        self.commission_policy = commission_policy

    def handle(self, transaction: Transaction) -> None:
        logger.info("create (referral payment) - trying create new payment")
        logger.info("create (referral payment) - transaction id: %s", transaction.pk)
        try:
            with db_transaction.atomic():
                self._handle(transaction)
        except Exception:
            logger.exception(
                "create (referral payment) - error while creating payment for transaction %s",
                transaction.pk,
            )

    def _handle(self, transaction: Transaction) -> None:
        referral_type = resolve_payment_type(PaymentType.REFERRAL_COMMISSION)
        payment = transaction.payment

        if payment.payment_type_id == referral_type.pk:
            logger.info("create (referral payment) - transaction is a referral payout itself")
            return

        commission = decimal_math.magnitude(transaction.commission_amount)
        if decimal_math.compare(commission, 0) <= 0:
            logger.info("create (referral payment) - transaction does not have commission")
            return

        referrer = payment.user.referrer
        if referrer is None:
            logger.info("create (referral payment) - transaction user not referral")
            return

        if self._already_paid(transaction, referral_type):
            logger.info("create (referral payment) - this commission already paid")
            return

        policy = self.commission_policy or get_commission_policy()
        referrer_amount = decimal_math.mul(commission, policy.referral_rate())
        if decimal_math.compare(referrer_amount, decimal_math.DUST) <= 0:
            logger.info(
                "create (referral payment) - referrer commission less than %s", decimal_math.DUST
            )
            return

        created = payment_service.create_payment(
            user=referrer,
            payment_type=referral_type,
            method=PaymentMethod.TOP_UP,
            full_amount=referrer_amount,
            parent_id=transaction.pk,
            commission_policy=policy,
        )
        logger.info(
            "create (referral payment) - success referral payment %s created for %s",
            created.pk, referrer_amount,
        )

    @staticmethod
    def _already_paid(transaction: Transaction, referral_type: PaymentType) -> bool:
        return Payment.objects.filter(parent_id=transaction.pk, payment_type=referral_type).exists()
