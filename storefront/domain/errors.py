# storefront/domain/errors.py
from typing import Any


class DomainError(Exception):
    """Base for errors reported to the caller as a failed envelope."""

    status_code = 400

    def __init__(self, message: str, data: Any = None):
        super().__init__(message)
        self.message = message
        self.data = data


class ClientError(DomainError):
    status_code = 400


class NotFoundError(ClientError):
    status_code = 404


class ForbiddenError(ClientError):
    status_code = 403


class EmptyCartError(ClientError):
    pass


class InvalidStatusError(ClientError):
    pass


class PaymentInitiationError(DomainError):
    status_code = 502


class PaymentVerificationError(DomainError):
    status_code = 402


class PaymentGatewayError(Exception):
    """Raised by the gateway client: transport failure or a rejected call."""


class DeletionBlockedError(DomainError):
    def __init__(self, message: str, blocked: dict | None = None, missing: list | None = None):
        super().__init__(message, data={"blocked": blocked or {}, "missing": missing or []})
        self.blocked = blocked or {}
        self.missing = missing or []
        # nothing to delete at all is a lookup failure, not a conflict
        self.status_code = 404 if self.missing and not self.blocked else 400
