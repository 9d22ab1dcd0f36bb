"""Signed authentication cookies.

A :class:`CookieValue` describes a signed-in user. It is signed with an
ECDSA key, serialised as JSON, base64 encoded and stored in a cookie.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
import struct
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

__all__ = [
    "AuthError",
    "KeyNotVerifiedError",
    "AuthCookieMissingError",
    "AuthConfig",
    "CookieValue",
    "Identity",
    "validate_security_stamp",
    "encode_auth_token",
    "decode_auth_token",
    "new_signing_key",
    "new_signing_key_curve",
    "get_cookie",
    "delete_cookie",
    "new_identity",
]

_DIGEST_SIZE = 49
_SEPARATOR = ord(";")
_SIGNATURE_ALGORITHM = ec.ECDSA(hashes.SHA512())
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})"
)

Key = Union[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]


class AuthError(Exception):
    """An authentication cookie or token could not be used."""


class KeyNotVerifiedError(AuthError):
    """The token's signature does not match the signing key.

    The decoded, unverified cookie value is kept in ``cookie_value``.
    """

    def __init__(self, cookie_value: Optional["CookieValue"] = None) -> None:
        super().__init__("auth: Unable to verify auth token")
        self.cookie_value = cookie_value


class AuthCookieMissingError(AuthError):
    """The request carries no authentication cookie."""

    def __init__(self) -> None:
        super().__init__("auth: Cookie is missing")


@dataclass
class AuthConfig:
    """Settings for the authentication cookie."""

    cookie_name: str = "auth"
    signing_key: Optional[ec.EllipticCurvePrivateKey] = None
    expiration: timedelta = timedelta(hours=8)
    is_sliding: bool = False

    def signing_key_public(self) -> ec.EllipticCurvePublicKey:
        """Public half of the signing key."""
        if self.signing_key is None:
            raise AuthError("auth: No signing key configured")
        return self.signing_key.public_key()


def validate_security_stamp(a: bytes, b: bytes) -> bool:
    """Return True when both security stamps are equal."""
    return bytes(a) == bytes(b)


def _as_utc_aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _time_binary(moment: datetime) -> bytes:
    """Binary form of a time: version, seconds since year 1, nanoseconds, zone offset.

    A zero offset is written as UTC.
    """
    moment = _as_utc_aware(moment)
    delta = moment - _ZERO_TIME
    seconds = delta.days * 86400 + delta.seconds
    nanos = moment.microsecond * 1000
    offset = int((moment.utcoffset() or timedelta(0)).total_seconds())
    if offset == 0:
        return struct.pack(">Bqih", 1, seconds, nanos, -1)
    minutes = int(offset / 60)
    extra = offset - minutes * 60
    if extra == 0:
        return struct.pack(">Bqih", 1, seconds, nanos, minutes)
    return struct.pack(">Bqih", 2, seconds, nanos, minutes) + bytes([extra & 0xFF])


def _format_time(moment: datetime) -> str:
    moment = _as_utc_aware(moment)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = int((moment.utcoffset() or timedelta(0)).total_seconds())
    if offset == 0:
        return text + "Z"
    sign = "+" if offset > 0 else "-"
    offset = abs(offset)
    return f"{text}{sign}{offset // 3600:02d}:{offset % 3600 // 60:02d}"


def _parse_time(text: Any) -> datetime:
    if not isinstance(text, str):
        raise ValueError("auth: timestamp is not a string")
    match = _TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"auth: invalid timestamp {text!r}")
    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    fraction = match.group(7) or ""
    micro = int((fraction + "000000")[:6]) if fraction else 0
    zone_text = match.group(8)
    if zone_text == "Z":
        zone = timezone.utc
    else:
        sign = -1 if zone_text[0] == "-" else 1
        hours, minutes = int(zone_text[1:3]), int(zone_text[4:6])
        zone = timezone(sign * timedelta(hours=hours, minutes=minutes))
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=zone)


def _b64_or_null(data: bytes) -> Optional[str]:
    return base64.b64encode(data).decode("ascii") if data else None


def _b64_field(value: Any) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise ValueError("auth: byte field is not a base64 string")
    return base64.b64decode(value, validate=True)


@dataclass
class CookieValue:
    """The signed contents of an authentication cookie."""

    id: uuid.UUID
    username: str
    security_stamp: bytes = b""
    timestamp: datetime = field(default_factory=lambda: _ZERO_TIME)
    signature: bytes = b""

    def digest(self) -> bytes:
        """The 49 bytes that are signed: id, ';', 16 bytes of stamp, ';', 15 bytes of time."""
        out = bytearray(_DIGEST_SIZE)
        out[0:16] = self.id.bytes
        out[16] = _SEPARATOR
        stamp = bytes(self.security_stamp)[: _DIGEST_SIZE - 17]
        out[17 : 17 + len(stamp)] = stamp
        out[33] = _SEPARATOR
        time_bytes = _time_binary(self.timestamp)[: _DIGEST_SIZE - 34]
        out[34 : 34 + len(time_bytes)] = time_bytes
        return bytes(out)

    def to_json(self) -> str:
        """Serialise as compact JSON; byte fields are base64, empty ones null."""
        return json.dumps(
            {
                "id": str(self.id),
                "username": self.username,
                "securityStamp": _b64_or_null(bytes(self.security_stamp)),
                "timestamp": _format_time(self.timestamp),
                "signature": _b64_or_null(bytes(self.signature)),
            },
            separators=(",", ":"),
        )

    @staticmethod
    def from_json(text: Union[str, bytes]) -> "CookieValue":
        """Read a cookie value from JSON; raises ValueError on malformed input."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("auth: cookie value is not a JSON object")
        try:
            user_id = uuid.UUID(data["id"]) if data.get("id") is not None else uuid.UUID(int=0)
        except (TypeError, AttributeError) as exc:
            raise ValueError(f"auth: invalid id: {exc}") from exc
        username = data.get("username") or ""
        if not isinstance(username, str):
            raise ValueError("auth: username is not a string")
        timestamp = data.get("timestamp")
        return CookieValue(
            id=user_id,
            username=username,
            security_stamp=_b64_field(data.get("securityStamp")),
            timestamp=_ZERO_TIME if timestamp is None else _parse_time(timestamp),
            signature=_b64_field(data.get("signature")),
        )

    def write_to_response(self, response: Any, config: AuthConfig) -> None:
        """Stamp the expiry, sign, and set the cookie on a werkzeug response."""
        self.timestamp = datetime.now(timezone.utc) + config.expiration
        token = encode_auth_token(config.signing_key, self)
        response.set_cookie(
            config.cookie_name,
            token,
            expires=self.timestamp,
            secure=True,
            httponly=True,
            samesite="Strict",
        )


@dataclass(frozen=True)
class Identity:
    """The signed-in user as seen by request handlers."""

    id: uuid.UUID
    username: str


def new_identity(cookie_value: CookieValue) -> Identity:
    """Build an identity from a verified cookie value."""
    return Identity(id=cookie_value.id, username=cookie_value.username)


def new_signing_key_curve(curve: ec.EllipticCurve) -> ec.EllipticCurvePrivateKey:
    """Generate a new ECDSA key on ``curve``."""
    return ec.generate_private_key(curve)


def new_signing_key() -> ec.EllipticCurvePrivateKey:
    """Generate a new ECDSA key on P-521."""
    return new_signing_key_curve(ec.SECP521R1())


def encode_auth_token(key: Optional[ec.EllipticCurvePrivateKey], cookie_value: CookieValue) -> str:
    """Sign ``cookie_value`` (setting its signature) and return the token."""
    if key is None:
        raise AuthError("auth: No signing key configured")
    cookie_value.signature = key.sign(cookie_value.digest(), _SIGNATURE_ALGORITHM)
    return base64.b64encode(cookie_value.to_json().encode("utf-8")).decode("ascii")


def decode_auth_token(key: Optional[Key], token: str) -> CookieValue:
    """Decode a token and check its signature against ``key``."""
    if key is None:
        raise AuthError("auth: No signing key configured")
    try:
        raw = base64.b64decode(token, validate=True)
        cookie_value = CookieValue.from_json(raw)
    except (binascii.Error, ValueError) as exc:
        raise AuthError(f"auth: Malformed auth token: {exc}") from exc

    public = key.public_key() if isinstance(key, ec.EllipticCurvePrivateKey) else key
    try:
        public.verify(cookie_value.signature, cookie_value.digest(), _SIGNATURE_ALGORITHM)
    except (InvalidSignature, ValueError) as exc:
        raise KeyNotVerifiedError(cookie_value) from exc
    return cookie_value


def _valid_cookie_value(value: str) -> bool:
    return all(0x20 <= ord(ch) < 0x7F and ch not in '";\\' for ch in value)


def get_cookie(request: Any, config: AuthConfig) -> CookieValue:
    """Read and verify the authentication cookie of a werkzeug request."""
    token = request.cookies.get(config.cookie_name)
    if token is None:
        raise AuthCookieMissingError()
    if not _valid_cookie_value(token):
        raise AuthError("auth: Invalid cookie value")
    return decode_auth_token(config.signing_key, token)


def delete_cookie(request: Any, response: Any, config: AuthConfig) -> None:
    """Tell the client to drop the authentication cookie it sent."""
    token = request.cookies.get(config.cookie_name)
    if token is None:
        raise AuthCookieMissingError()
    response.set_cookie(config.cookie_name, token, max_age=0, path=None)