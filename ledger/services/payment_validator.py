from rest_framework import status

from ledger.models import PaymentType, User

from .exceptions import LedgerError


class PaymentValidationError(LedgerError):
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


def get_user(user_id: int, field: str = "user_id") -> User:
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise PaymentValidationError(f"{field}: user not found", status.HTTP_404_NOT_FOUND)
    return user


def get_payment_type(name: str) -> PaymentType:
    payment_type = PaymentType.objects.filter(name=name).first()
    if payment_type is None:
        raise PaymentValidationError("unsupported payment_type", status.HTTP_422_UNPROCESSABLE_ENTITY)
    return payment_type


def validate_payment_request_data(data: dict) -> dict:
    """Resolve the users and payment type of a create-payment payload.

    Method and amount rules belong to create_payment. Raises PaymentValidationError.
    """
    resolved = {
        "user": get_user(data["user_id"]),
        "payment_type": get_payment_type(data["payment_type"]),
        "initiator": None,
    }
    if data.get("initiator_id") is not None:
        resolved["initiator"] = get_user(data["initiator_id"], field="initiator_id")
    return resolved
