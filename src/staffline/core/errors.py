from __future__ import annotations


class StafflineError(Exception):
    """Base class for errors the HTTP and CLI adapters translate for the caller."""

    code = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StafflineError):
    code = "validation_error"
    status_code = 400


class AuthenticationError(StafflineError):
    code = "authentication_error"
    status_code = 401


class PermissionDeniedError(StafflineError):
    code = "permission_denied"
    status_code = 403


class NotFoundError(StafflineError):
    code = "not_found"
    status_code = 404


class ConflictError(StafflineError):
    code = "conflict"
    status_code = 409


class TransactionError(StafflineError):
    code = "transaction_error"
    status_code = 500
