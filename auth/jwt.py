"""
Compact bearer tokens (HS256) implemented with the Python standard library.
Base64url without padding, HMAC-SHA256 signature, exp validation.

Token layout: base64url(header) "." base64url(payload) "." base64url(signature)
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError, field_validator

DEFAULT_LIFETIME_SECONDS = 604800  # 7 days

_HEADER: Dict[str, str] = {"alg": "HS256", "typ": "JWT"}

UserId = Union[str, int]


class TokenError(ValueError):
    """Base class for every token failure."""


class InvalidArgument(TokenError):
    """Bad input to issue()."""


class MalformedToken(TokenError):
    """Structurally invalid token or undecodable segment."""


class InvalidSignature(TokenError):
    """Signature does not match the recomputed HMAC."""


class TokenExpired(TokenError):
    """Signature is valid but exp has passed."""


class TokenPayload(BaseModel):
    """Decoded claims. `sub` is required, `iat`/`exp` optional, extra claims kept."""

    model_config = ConfigDict(extra="allow", frozen=True)

    sub: Union[StrictStr, StrictInt]
    iat: Optional[StrictInt] = None
    exp: Optional[StrictInt] = None

    @field_validator("sub")
    @classmethod
    def _sub_not_empty(cls, v: Union[str, int]) -> Union[str, int]:
        if isinstance(v, str) and not v.strip():
            raise ValueError("sub must not be empty")
        return v


def _b64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    """Base64url decode with automatic padding restoration."""
    s = data.encode("ascii")
    padding = b"=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + padding)


def _json_segment(obj: Dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


def _decode_segment(segment: str, what: str) -> Dict[str, Any]:
    try:
        data = json.loads(_b64url_decode(segment).decode("utf-8"))
    except (UnicodeError, binascii.Error, ValueError) as e:
        raise MalformedToken(f"Undecodable {what}: {type(e).__name__}") from e
    if not isinstance(data, dict):
        raise MalformedToken(f"{what} is not a JSON object")
    return data


def now_ts() -> int:
    """Return current UNIX timestamp (seconds)."""
    return int(time.time())


class TokenService:
    """
    Issues and verifies bearer tokens without server-side state.

    The secret and lifetime are fixed at construction; `clock` supplies the
    default `now` for issue()/verify() and is injectable for tests.
    """

    __slots__ = ("_key", "_lifetime", "_clock")

    def __init__(
        self,
        secret: Union[str, bytes],
        lifetime_seconds: int = DEFAULT_LIFETIME_SECONDS,
        clock: Callable[[], int] = now_ts,
    ) -> None:
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not isinstance(secret, bytes) or not secret:
            raise ValueError("Token secret must be a non-empty string")
        if isinstance(lifetime_seconds, bool) or not isinstance(lifetime_seconds, int) or lifetime_seconds <= 0:
            raise ValueError("lifetime_seconds must be a positive integer")
        self._key = secret
        self._lifetime = lifetime_seconds
        self._clock = clock

    def __repr__(self) -> str:
        return f"TokenService(lifetime_seconds={self._lifetime}, secret=***)"

    @property
    def lifetime_seconds(self) -> int:
        return self._lifetime

    def _sign(self, signing_input: str) -> str:
        digest = hmac.new(self._key, signing_input.encode("ascii"), hashlib.sha256).digest()
        return _b64url_encode(digest)

    def issue(self, user_id: UserId, now: Optional[int] = None) -> str:
        """
        Encode a token for `user_id` with iat=now and exp=now+lifetime.
        Raises InvalidArgument when user_id is not a non-empty str or an int.
        """
        if isinstance(user_id, bool) or not isinstance(user_id, (str, int)):
            raise InvalidArgument(f"user_id must be str or int, got {type(user_id).__name__}")
        if isinstance(user_id, str) and not user_id.strip():
            raise InvalidArgument("user_id must not be empty")

        iat = self._clock() if now is None else int(now)
        payload = {"sub": user_id, "iat": iat, "exp": iat + self._lifetime}

        header_b64 = _json_segment(_HEADER)
        payload_b64 = _json_segment(payload)
        sig_b64 = self._sign(f"{header_b64}.{payload_b64}")
        return f"{header_b64}.{payload_b64}.{sig_b64}"

    def verify(self, token: str, now: Optional[int] = None) -> TokenPayload:
        """
        Decode and verify a token.
        - Requires exactly three non-empty segments
        - Verifies the signature in constant time before touching the payload
        - Rejects when exp is present and now > exp
        Returns the validated payload. Raises a TokenError subclass on any failure.
        """
        if not isinstance(token, str):
            raise MalformedToken("Token must be a string")
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            raise MalformedToken("Invalid token format")
        header_b64, payload_b64, sig_b64 = parts

        try:
            expected = self._sign(f"{header_b64}.{payload_b64}")
            provided = sig_b64.encode("ascii")
        except UnicodeEncodeError as e:
            raise MalformedToken("Token contains non-ASCII characters") from e
        # compare canonical encodings so a non-canonical trailing char cannot alias a valid signature
        if not hmac.compare_digest(expected.encode("ascii"), provided):
            raise InvalidSignature("Invalid token signature")

        header = _decode_segment(header_b64, "header")
        if header.get("alg") != _HEADER["alg"]:
            raise MalformedToken("Unsupported token header")

        try:
            payload = TokenPayload.model_validate(_decode_segment(payload_b64, "payload"))
        except ValidationError as e:
            raise MalformedToken(f"Invalid claims: {e.error_count()} error(s)") from e

        current = self._clock() if now is None else int(now)
        if payload.exp is not None and current > payload.exp:
            raise TokenExpired("Token expired")

        return payload
