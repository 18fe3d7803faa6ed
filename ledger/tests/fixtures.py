from decimal import Decimal

from ledger.models import PaymentMethod, PaymentType, Setting, User
from ledger.services.payment_service import create_payment


class LedgerFixtures:
    """Payment types at 1%, referral payouts free of commission, referrers get 10%."""

    def setUp(self):
        super().setUp()
        self.real_money = PaymentType.objects.create(name=PaymentType.REAL_MONEY, commission=Decimal("0.01"))
        self.referral_type = PaymentType.objects.create(
            name=PaymentType.REFERRAL_COMMISSION, commission=Decimal("0")
        )
        self.setting = Setting.objects.create(site_name="backoffice", referral_commission=Decimal("0.10"))

    def make_user(self, email, **kwargs):
        return User.objects.create(email=email, **kwargs)

    def top_up(self, user, full_amount="900", **kwargs):
        return create_payment(
            user=user, payment_type=self.real_money, method=PaymentMethod.TOP_UP, full_amount=full_amount, **kwargs
        )

    def withdraw(self, user, full_amount="900", **kwargs):
        return create_payment(
            user=user, payment_type=self.real_money, method=PaymentMethod.WITHDRAW, full_amount=full_amount, **kwargs
        )
