from abc import ABC, abstractmethod
from decimal import Decimal

from django.conf import settings
from django.utils.module_loading import import_string

from ledger.models import PaymentType, Setting

from .exceptions import ConfigurationError


class CommissionPolicy(ABC):
    """Pluggable source of commission rates.

    Rates are fractions: ``Decimal("0.01")`` means 1%.
    """

    @abstractmethod
    def percent_for(self, payment_type: PaymentType) -> Decimal:
        pass

    @abstractmethod
    def referral_rate(self) -> Decimal:
        pass


class DatabaseCommissionPolicy(CommissionPolicy):
    def percent_for(self, payment_type: PaymentType) -> Decimal:
        if payment_type.commission is None:
            raise ConfigurationError(f"no commission configured for {payment_type.name}")
        return payment_type.commission

    def referral_rate(self) -> Decimal:
        setting = Setting.objects.order_by("pk").first()
        if setting is None or setting.referral_commission is None:
            raise ConfigurationError("no referral commission configured")
        return setting.referral_commission


def get_commission_policy() -> CommissionPolicy:
    return import_string(settings.LEDGER_COMMISSION_POLICY)()


def resolve_payment_type(name: str) -> PaymentType:
    payment_type = PaymentType.objects.filter(name=name).first()
    if payment_type is None:
        raise ConfigurationError(f"unknown payment type: {name}")
    return payment_type
