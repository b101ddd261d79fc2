# dao/errors.py
"""Business-rule errors raised by the dao layer.

Each error carries a machine-readable ``code`` and the HTTP ``status`` the API
answers with. They are rejections, never transient failures: callers surface
them as-is and do not retry.
"""


class LedgerError(Exception):
    code = "LEDGER_ERROR"
    status = 400

    def __init__(self, message: str, **data):
        super().__init__(message)
        self.message = message
        self.data = data

    def to_dict(self) -> dict:
        payload = {"success": False, "code": self.code, "message": self.message}
        if self.data:
            payload["details"] = self.data
        return payload


class ValidationError(LedgerError):
    code = "VALIDATION_ERROR"


class InvalidQuantityError(LedgerError):
    code = "INVALID_QUANTITY"


class InsufficientStockError(LedgerError):
    code = "INSUFFICIENT_STOCK"


class BatchLockedError(LedgerError):
    code = "BATCH_LOCKED"
    status = 409


class AlreadyFinishedError(LedgerError):
    code = "ALREADY_FINISHED"
    status = 409


class DuplicateEntryError(LedgerError):
    code = "DUPLICATE_ENTRY"
    status = 409


class InUseError(LedgerError):
    code = "IN_USE"
    status = 409


class NotFoundError(LedgerError):
    code = "NOT_FOUND"
    status = 404


class AuthenticationError(LedgerError):
    code = "UNAUTHORIZED"
    status = 401


class AccessDeniedError(LedgerError):
    code = "ACCESS_DENIED"
    status = 403
