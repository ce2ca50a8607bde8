from __future__ import annotations

import enum
import typing as t


class CartError(Exception):
    """Base class for errors the cart core surfaces to its callers.

    `code` is a stable machine-readable identifier; mapping it onto a transport
    status is the caller's job.
    """

    code = "CART_ERROR"

    def __init__(self, message: str = "Cart error") -> None:
        super().__init__(message)
        self.message = message


class CartNotFoundError(CartError):
    code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class ValidationError(CartError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed") -> None:
        super().__init__(message)


class TokenErrorKind(str, enum.Enum):
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    PAYLOAD_INVALID = "payload_invalid"
    PAYLOAD_MALFORMED = "payload_malformed"
    EXPIRED = "expired_or_future_timestamp"


_TOKEN_MESSAGES = {
    TokenErrorKind.MALFORMED: "Invalid token format",
    TokenErrorKind.SIGNATURE_INVALID: "Token signature invalid",
    TokenErrorKind.PAYLOAD_INVALID: "Token payload invalid",
    TokenErrorKind.PAYLOAD_MALFORMED: "Token payload malformed",
    TokenErrorKind.EXPIRED: "Token expired or invalid timestamp",
}


class TokenError(CartError):
    code = "TOKEN_ERROR"

    def __init__(self, kind: TokenErrorKind, message: t.Optional[str] = None) -> None:
        super().__init__(message or _TOKEN_MESSAGES[kind])
        self.kind = kind


def to_error_response(error: BaseException) -> t.Dict[str, t.Dict[str, str]]:
    """Build the `{"error": {"code", "message"}}` envelope for any exception."""
    if isinstance(error, CartError):
        return {"error": {"code": error.code, "message": error.message}}
    return {"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}}
