"""Fixed-point money arithmetic.

Every value is a ``Decimal`` truncated toward zero to ``scale`` fractional
digits, the same way bcmath truncates. Floats are refused: a float has
already lost the exact value.
"""
from decimal import ROUND_DOWN, Context, Decimal, InvalidOperation, localcontext
from typing import Union

from .exceptions import InvalidAmountError

SCALE = 8
DUST = Decimal("0.00000001")
# largest magnitude a DecimalField(max_digits=20, decimal_places=8) column holds
MAX_AMOUNT = Decimal("999999999999.99999999")

Number = Union[Decimal, int, str]

# wide enough that add/sub/mul of two 20-digit values never rounds
_CONTEXT = Context(prec=80)


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(f"unsupported amount type: {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise InvalidAmountError(f"not a decimal number: {value!r}")
    else:
        raise InvalidAmountError(f"unsupported amount type: {type(value).__name__}")
    if not result.is_finite():
        raise InvalidAmountError(f"not a finite number: {value!r}")
    return result


def _quantize(value: Decimal, scale: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_DOWN, context=_CONTEXT)


def add(a: Number, b: Number, scale: int = SCALE) -> Decimal:
    with localcontext(_CONTEXT):
        return _quantize(to_decimal(a) + to_decimal(b), scale)


def sub(a: Number, b: Number, scale: int = SCALE) -> Decimal:
    with localcontext(_CONTEXT):
        return _quantize(to_decimal(a) - to_decimal(b), scale)


def mul(a: Number, b: Number, scale: int = SCALE) -> Decimal:
    with localcontext(_CONTEXT):
        return _quantize(to_decimal(a) * to_decimal(b), scale)


def compare(a: Number, b: Number, scale: int = SCALE) -> int:
    """Return -1, 0 or 1 comparing ``a`` and ``b`` at ``scale`` digits."""
    left = _quantize(to_decimal(a), scale)
    right = _quantize(to_decimal(b), scale)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def negate(value: Number, scale: int = SCALE) -> Decimal:
    return mul(value, -1, scale)


def magnitude(value: Number, scale: int = SCALE) -> Decimal:
    return _quantize(abs(to_decimal(value)), scale)


def ensure_storable(value: Number, scale: int = SCALE) -> Decimal:
    """Return ``value`` truncated to ``scale``; raise if a money column can not hold it."""
    result = _quantize(to_decimal(value), scale)
    if abs(result) > MAX_AMOUNT:
        raise InvalidAmountError("amount is too large")
    return result
