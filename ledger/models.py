from django.db import models
from django.utils import timezone


MONEY = dict(max_digits=20, decimal_places=8)


class User(models.Model):
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    balance = models.DecimalField(default=0, **MONEY)
    referrer = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.SET_NULL, related_name="referrals"
    )
    is_admin = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.email


class PaymentType(models.Model):
    """Payment category. ``commission`` is a fraction: 0.01 means 1%."""

    REAL_MONEY = "real_money"
    REFERRAL_COMMISSION = "referral_commission"

    name = models.CharField(max_length=64, unique=True)
    commission = models.DecimalField(null=True, blank=True, max_digits=12, decimal_places=8)

    def __str__(self):
        return self.name


class Setting(models.Model):
    site_name = models.CharField(max_length=255, blank=True)
    referral_commission = models.DecimalField(null=True, blank=True, max_digits=12, decimal_places=8)

    def __str__(self):
        return self.site_name


class PaymentMethod(models.TextChoices):
    TOP_UP = "top_up", "Top up"
    WITHDRAW = "withdraw", "Withdraw"


class PaymentStatus(models.TextChoices):
    CREATE = "create", "Create"
    PAID = "paid", "Paid"
    CANCEL = "cancel", "Cancel"
    EXPIRED = "expired", "Expired"


class Payment(models.Model):
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="payments")
    payment_type = models.ForeignKey(PaymentType, on_delete=models.PROTECT, related_name="payments")
    full_amount = models.DecimalField(**MONEY)
    amount = models.DecimalField(**MONEY)
    commission_amount = models.DecimalField(**MONEY)
    method = models.CharField(max_length=16, choices=PaymentMethod.choices)
    status = models.CharField(max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.CREATE)
    # id of the Transaction a referral payout was generated from
    parent_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    txid = models.CharField(max_length=128, null=True, blank=True)
    address = models.CharField(max_length=255, blank=True)
    description = models.CharField(max_length=255, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [models.Index(fields=["parent_id", "payment_type"])]

    def __str__(self):
        return f"{self.pk}:{self.method}:{self.full_amount}"


class Transaction(models.Model):
    payment = models.OneToOneField(Payment, on_delete=models.PROTECT, related_name="transaction")
    full_amount = models.DecimalField(**MONEY)
    amount = models.DecimalField(**MONEY)
    commission_amount = models.DecimalField(**MONEY)
    old_balance = models.DecimalField(**MONEY)
    new_balance = models.DecimalField(**MONEY)
    created_at = models.DateTimeField(default=timezone.now)

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("transactions are immutable")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.payment_id}:{self.old_balance}->{self.new_balance}"


class Notice(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.title
