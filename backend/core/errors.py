"""Error taxonomy. Every error carries the HTTP status it is rendered with."""
from fastapi import status


class EggLedgerError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EggLedgerError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(EggLedgerError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(EggLedgerError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(EggLedgerError):
    # Login against an unknown user is reported as a bad request, like other login failures.
    status_code = status.HTTP_400_BAD_REQUEST


class StorageError(EggLedgerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InventoryInvariantError(EggLedgerError):
    """Raised when a ledger event cannot be applied to the inventory projection."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
