from rest_framework import status


class LedgerError(Exception):
    """Base error of the payment ledger.

    ``str(error)`` is safe to show to an admin; internal detail goes to the log only.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "ledger error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class PermissionDenied(LedgerError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "permission denied"


class InsufficientFunds(LedgerError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "insufficient funds"


class ConfigurationError(LedgerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "ledger is not configured"


class PersistenceFailure(LedgerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "can not save payment"


class InvalidAmountError(LedgerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid amount"
