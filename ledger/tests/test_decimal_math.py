from decimal import Decimal

from django.test import SimpleTestCase

from ledger.services import decimal_math
from ledger.services.exceptions import InvalidAmountError


class DecimalMathTests(SimpleTestCase):
    def test_add_is_exact(self):
        self.assertEqual(decimal_math.add("0.1", "0.2"), Decimal("0.3"))
        self.assertEqual(decimal_math.add("99999999999.99999999", "0.00000001"), Decimal("100000000000"))

    def test_sub_and_mul(self):
        self.assertEqual(decimal_math.sub("900", "9"), Decimal("891"))
        self.assertEqual(decimal_math.mul("900", "0.01"), Decimal("9"))

    def test_results_truncate_to_eight_digits(self):
        self.assertEqual(decimal_math.mul("0.123456789", 1), Decimal("0.12345678"))
        # toward zero for negatives too
        self.assertEqual(decimal_math.mul("-0.123456789", 1), Decimal("-0.12345678"))
        self.assertEqual(decimal_math.mul("0.009", "0.000001"), Decimal("0"))

    def test_custom_scale(self):
        self.assertEqual(decimal_math.mul("10", "0.333", scale=2), Decimal("3.33"))

    def test_compare(self):
        self.assertEqual(decimal_math.compare("2", "10"), -1)
        self.assertEqual(decimal_math.compare("10", "2"), 1)
        self.assertEqual(decimal_math.compare("1000", "1000.00000000"), 0)
        # digits past the scale are ignored
        self.assertEqual(decimal_math.compare("1.000000001", "1"), 0)

    def test_negate_and_magnitude(self):
        self.assertEqual(decimal_math.negate("9"), Decimal("-9"))
        self.assertEqual(decimal_math.negate("-9"), Decimal("9"))
        self.assertEqual(decimal_math.magnitude("-0.5"), Decimal("0.5"))

    def test_rejects_floats_and_garbage(self):
        for bad in (0.1, "abc", "NaN", "Infinity", None, True):
            with self.assertRaises(InvalidAmountError):
                decimal_math.add(bad, 1)

    def test_ensure_storable(self):
        self.assertEqual(decimal_math.ensure_storable("999999999999.999999999"), decimal_math.MAX_AMOUNT)
        self.assertEqual(decimal_math.ensure_storable("-12.5"), Decimal("-12.5"))
        for too_large in ("1000000000000", "-1000000000000"):
            with self.assertRaises(InvalidAmountError):
                decimal_math.ensure_storable(too_large)
