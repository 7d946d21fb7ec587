"""Session token service.

Signed, self-contained session tokens (JWT, HMAC-SHA256) built on PyJWT.

Tokens carry the user claims (sub, role, username) plus the registered
fields iat, exp and iss. They are stateless: there is no server-side
session and no revocation list, so a token stays valid until it expires
or the process restarts with a new signing secret.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError


DEFAULT_ISSUER = "shopkeep-api"
DEFAULT_EXPIRES_IN = "1h"

REGISTERED_CLAIMS = {"sub", "role", "username", "iat", "exp", "iss"}

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class InvalidToken(Exception):
    """Raised when a token is malformed, tampered with, or expired."""


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Parse an expiry such as ``3600``, ``"90s"``, ``"15m"``, ``"2h"`` or ``"7d"``.

    Bare numbers are seconds. Negative timedeltas are accepted (they
    produce tokens that are already expired).

    Raises:
        ValueError: If the value cannot be interpreted as a duration.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=float(amount) * _UNIT_SECONDS[unit.lower()])


@dataclass(frozen=True, slots=True, kw_only=True)
class Claims:
    """Verified session token claims.

    Attributes:
        subject_id: User identifier (``sub``).
        role: Role string as issued; unknown roles fail every role gate.
        username: Login name of the user.
        issued_at: ``iat`` as an aware UTC datetime.
        expires_at: ``exp`` as an aware UTC datetime.
        issuer: ``iss`` when present.
        extra: Any payload keys beyond the registered ones.
    """

    subject_id: str
    role: str
    username: str
    issued_at: datetime
    expires_at: datetime
    issuer: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Claims":
        return cls(
            subject_id=str(payload["sub"]),
            role=str(payload["role"]),
            username=str(payload["username"]),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            issuer=payload.get("iss"),
            extra={k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS},
        )


class TokenService:
    """Issue and verify signed session tokens.

    Usage:
        tokens = TokenService(secrets.signing_secret, default_expires_in="2h")
        token = tokens.issue({"sub": user.id, "role": user.role, "username": user.username})
        claims = tokens.verify(token)
    """

    algorithm = "HS256"

    def __init__(
        self,
        secret: str,
        default_expires_in: str | int | timedelta = DEFAULT_EXPIRES_IN,
        issuer: str = DEFAULT_ISSUER,
    ) -> None:
        if len(secret) < 32:
            raise ValueError("Token signing secret must be at least 32 characters")

        self._secret = secret
        self._default_expires_in = parse_duration(default_expires_in)
        self._issuer = issuer

    def issue(
        self,
        claims: Mapping[str, Any],
        expires_in: str | int | timedelta | None = None,
        issuer: str | None = None,
    ) -> str:
        """Sign a token carrying ``claims`` plus iat/exp/iss.

        Registered fields always win over same-named keys in ``claims``.
        """
        lifetime = self._default_expires_in if expires_in is None else parse_duration(expires_in)
        now = datetime.now(timezone.utc)

        payload = dict(claims)
        payload.update(
            iat=int(now.timestamp()),
            exp=int((now + lifetime).timestamp()),
            iss=issuer or self._issuer,
        )
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Claims:
        """Check signature and expiry and return the claims.

        Raises:
            InvalidToken: For any malformed, tampered, incomplete or expired token.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
            return Claims.from_payload(payload)
        except (InvalidTokenError, KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            raise InvalidToken(str(e) or "Invalid token") from e

    def decode(self, token: str) -> dict[str, Any] | None:
        """Decode without verifying. Diagnostics only, never for authorization."""
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except InvalidTokenError:
            return None
