"""Signed, age-bounded recovery tokens.

A token is ``<payload>.<signature>``: both segments are base64url without
padding. The payload is compact JSON ``{"iat": <epoch ms>, "items": [{"sku",
"quantity"}, ...]}`` and the signature is HMAC-SHA256 over the payload
segment. Tokens carry no cart ids, customer data or totals; totals are always
recomputed from the price book on recovery.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import math
import typing as t

from cart_db.core.errors import TokenError, TokenErrorKind
from cart_db.core.models import TokenItem
from cart_db.monitoring.metrics import recovery_token_failures_total, recovery_tokens_issued_total
from cart_db.utils.clock import Clock, SystemClock

_logger = logging.getLogger(__name__)

JSON = t.Dict[str, t.Any]


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _sign(segment: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), segment.encode("utf-8"), hashlib.sha256).digest()
    return _b64encode(digest)


def _is_number(value: t.Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def generate_token(payload: JSON, secret: str) -> str:
    encoded = _b64encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
    return f"{encoded}.{_sign(encoded, secret)}"


def verify_token(token: str, secret: str, max_age_ms: int, now_ms: int) -> t.List[TokenItem]:
    parts = token.split(".")
    if len(parts) != 2:
        raise TokenError(TokenErrorKind.MALFORMED)
    encoded, signature = parts

    provided = signature.encode("utf-8", "replace")
    expected = _sign(encoded, secret).encode("utf-8")
    if len(provided) != len(expected) or not hmac.compare_digest(provided, expected):
        raise TokenError(TokenErrorKind.SIGNATURE_INVALID)

    try:
        payload = json.loads(_b64decode(encoded).decode("utf-8"))
    except ValueError:
        raise TokenError(TokenErrorKind.PAYLOAD_INVALID) from None

    if not isinstance(payload, dict):
        raise TokenError(TokenErrorKind.PAYLOAD_MALFORMED)
    iat = payload.get("iat")
    raw_items = payload.get("items")
    if not _is_number(iat) or not isinstance(raw_items, list):
        raise TokenError(TokenErrorKind.PAYLOAD_MALFORMED)

    items: t.List[TokenItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise TokenError(TokenErrorKind.PAYLOAD_MALFORMED)
        sku = raw.get("sku")
        quantity = raw.get("quantity")
        if not isinstance(sku, str) or not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise TokenError(TokenErrorKind.PAYLOAD_MALFORMED)
        items.append(TokenItem(sku, quantity))

    age = now_ms - iat
    if age > max_age_ms or age < 0:
        raise TokenError(TokenErrorKind.EXPIRED)

    return items


class RecoveryTokenCodec:
    """Stateless sign/verify pair bound to a secret, a max age and a clock."""

    def __init__(self, secret: str, max_age_ms: int, clock: t.Optional[Clock] = None) -> None:
        if not secret:
            raise ValueError("recovery token secret must not be empty")
        self._secret = secret
        self._max_age_ms = max_age_ms
        self._clock = clock or SystemClock()

    @property
    def max_age_ms(self) -> int:
        return self._max_age_ms

    def sign(self, items: t.Iterable[t.Any]) -> str:
        payload = {
            "iat": self._clock.now_ms(),
            "items": [{"sku": sku, "quantity": quantity} for sku, quantity in _reduce(items)],
        }
        recovery_tokens_issued_total.inc()
        return generate_token(payload, self._secret)

    def verify(self, token: str) -> t.List[TokenItem]:
        try:
            return verify_token(token, self._secret, self._max_age_ms, self._clock.now_ms())
        except TokenError as exc:
            recovery_token_failures_total.inc(kind=exc.kind.value)
            _logger.info("Rejected recovery token: %s", exc.kind.value)
            raise


def _reduce(items: t.Iterable[t.Any]) -> t.Iterator[t.Tuple[str, int]]:
    # CartItem-like objects and plain (sku, quantity) pairs are both accepted;
    # only sku and quantity ever leave this module.
    for item in items:
        if hasattr(item, "sku"):
            yield item.sku, item.quantity
        else:
            sku, quantity = item
            yield sku, quantity
