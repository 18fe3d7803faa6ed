from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from rest_framework.test import APITestCase

from ledger.models import Payment, PaymentStatus, Transaction

from .fixtures import LedgerFixtures


class PaymentsTests(LedgerFixtures, APITestCase):
    base_url = "/api/v1/payments"

    def setUp(self):
        super().setUp()
        self.admin = self.make_user("admin@example.com", is_admin=True)
        self.user = self.make_user("user@example.com")

    def payload(self, **overrides):
        payload = {
            "user_id": self.user.pk,
            "payment_type": "real_money",
            "method": "top_up",
            "full_amount": "900",
            "initiator_id": self.admin.pk,
        }
        payload.update(overrides)
        return payload

    def test_top_up_create(self):
        r = self.client.post(self.base_url, self.payload(), format="json")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data["status"], "create")
        self.assertEqual(r.data["payment_type"], "real_money")
        self.assertEqual(r.data["full_amount"], "900.00000000")
        self.assertEqual(r.data["amount"], "891.00000000")
        self.assertEqual(r.data["commission_amount"], "9.00000000")
        self.assertEqual(r.data["description"], "User top up balance")
        self.assertIsNone(r.data["transaction"])

    def test_withdraw_create(self):
        self.user.balance = Decimal("1000")
        self.user.save()
        r = self.client.post(self.base_url, self.payload(method="withdraw"), format="json")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data["full_amount"], "-900.00000000")
        self.assertEqual(r.data["amount"], "-891.00000000")
        self.assertEqual(r.data["commission_amount"], "-9.00000000")
        self.assertEqual(r.data["description"], "User withdraw balance")

    def test_withdraw_without_money(self):
        r = self.client.post(self.base_url, self.payload(method="withdraw"), format="json")
        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.data["detail"], "Can't create payment")
        self.assertFalse(Payment.objects.exists())

    def test_non_admin_can_not_pay_for_others(self):
        other = self.make_user("other@example.com")
        r = self.client.post(self.base_url, self.payload(initiator_id=other.pk), format="json")
        self.assertEqual(r.status_code, 403)

    def test_unknown_payment_type(self):
        r = self.client.post(self.base_url, self.payload(payment_type="gift"), format="json")
        self.assertEqual(r.status_code, 422)

    def test_unknown_user(self):
        r = self.client.post(self.base_url, self.payload(user_id=999999), format="json")
        self.assertEqual(r.status_code, 404)

    def test_rejects_non_positive_amount(self):
        r = self.client.post(self.base_url, self.payload(full_amount="0"), format="json")
        self.assertEqual(r.status_code, 400)

    def test_unknown_method(self):
        r = self.client.post(self.base_url, self.payload(method="refund"), format="json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["detail"], "Can't create payment")
        self.assertEqual(r.data["reason"], "unknown payment method: refund")
        self.assertFalse(Payment.objects.exists())

    def test_configuration_detail_is_not_exposed(self):
        self.real_money.commission = None
        self.real_money.save()
        r = self.client.post(self.base_url, self.payload(), format="json")
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.data, {"detail": "Can't create payment"})

    def test_confirm_and_confirm_again(self):
        r = self.client.post(self.base_url, self.payload(), format="json")
        url = f"{self.base_url}/{r.data['id']}"

        r1 = self.client.put(url, {"action": "confirm"}, format="json")
        self.assertEqual(r1.status_code, 200)
        self.assertEqual(r1.data["detail"], "Success!")
        self.assertEqual(r1.data["payment"]["status"], "paid")
        self.assertEqual(r1.data["payment"]["transaction"]["new_balance"], "891.00000000")

        r2 = self.client.put(url, {"action": "confirm"}, format="json")
        self.assertEqual(r2.status_code, 409)
        self.assertEqual(r2.data["detail"], "Payment already closed")
        self.assertEqual(Transaction.objects.count(), 1)
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("891"))

    def test_cancel(self):
        r = self.client.post(self.base_url, self.payload(), format="json")
        url = f"{self.base_url}/{r.data['id']}"
        r1 = self.client.put(url, {"action": "cancel"}, format="json")
        self.assertEqual(r1.status_code, 200)
        self.assertEqual(Payment.objects.get().status, PaymentStatus.CANCEL)

        r2 = self.client.put(url, {"action": "confirm"}, format="json")
        self.assertEqual(r2.status_code, 409)
        self.assertFalse(Transaction.objects.exists())

    def test_confirm_storage_failure(self):
        r = self.client.post(self.base_url, self.payload(), format="json")
        url = f"{self.base_url}/{r.data['id']}"

        with mock.patch.object(Transaction.objects, "create", side_effect=DatabaseError("disk full")):
            r1 = self.client.put(url, {"action": "confirm"}, format="json")
        self.assertEqual(r1.status_code, 500)
        self.assertEqual(r1.data, {"detail": "Can't update payment"})
        self.assertEqual(Payment.objects.get().status, PaymentStatus.CREATE)
        self.assertFalse(Transaction.objects.exists())
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("0"))

    def test_confirm_withdraw_beyond_balance(self):
        self.user.balance = Decimal("1000")
        self.user.save()
        first = self.client.post(self.base_url, self.payload(method="withdraw", full_amount="600"), format="json")
        second = self.client.post(self.base_url, self.payload(method="withdraw", full_amount="600"), format="json")
        self.client.put(f"{self.base_url}/{first.data['id']}", {"action": "confirm"}, format="json")

        r = self.client.put(f"{self.base_url}/{second.data['id']}", {"action": "confirm"}, format="json")
        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.data["detail"], "Can't update payment")
        self.assertEqual(Payment.objects.get(pk=second.data["id"]).status, PaymentStatus.CREATE)

    def test_unknown_action(self):
        r = self.client.post(self.base_url, self.payload(), format="json")
        r1 = self.client.put(f"{self.base_url}/{r.data['id']}", {"action": "refund"}, format="json")
        self.assertEqual(r1.status_code, 400)

    def test_show_payment(self):
        r = self.client.post(self.base_url, self.payload(), format="json")
        r1 = self.client.get(f"{self.base_url}/{r.data['id']}")
        self.assertEqual(r1.status_code, 200)
        self.assertEqual(r1.data["id"], r.data["id"])
        self.assertEqual(self.client.get(f"{self.base_url}/999999").status_code, 404)

    def test_finance_statistics(self):
        r = self.client.post(self.base_url, self.payload(), format="json")
        self.client.put(f"{self.base_url}/{r.data['id']}", {"action": "confirm"}, format="json")

        stats = self.client.get("/api/v1/statistics/finance")
        self.assertEqual(stats.status_code, 200)
        self.assertEqual(stats.data["total_top_up"], "891.00000000")
        self.assertEqual(stats.data["total_commission"], "9.00000000")
        self.assertEqual(stats.data["balance_difference"], "891.00000000")
        self.assertEqual(len(stats.data["daily"]), 1)
