"""JWT utilities — HS256 token signing and verification"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from storefront.errors import (
    ConfigurationError,
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
)

_IDENTITY_CLAIMS = ("sub", "email", "username", "role")


class IdentityClaims(NamedTuple):
    """Identity embedded in an access token."""
    sub: str                  # user id
    email: str
    username: str
    role: str                 # ADMIN | SUPER_ADMIN
    iat: datetime
    exp: datetime
    jti: str


def _to_datetime(timestamp: Any) -> datetime:
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)


class TokenCodec:
    """Creates and validates signed, time-bound identity tokens.

    One instance per process, built from settings at startup. A missing
    secret is a startup failure; there is no fallback key.
    """

    def __init__(self, secret_key: Optional[str], lifetime_seconds: int = 86400, algorithm: str = "HS256"):
        if not secret_key:
            raise ConfigurationError("JWT_SECRET_KEY is not configured")
        if lifetime_seconds <= 0:
            raise ConfigurationError("JWT_EXPIRE_SECONDS must be positive")
        self._secret_key = secret_key
        self.lifetime_seconds = lifetime_seconds
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings) -> "TokenCodec":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            lifetime_seconds=settings.JWT_EXPIRE_SECONDS,
            algorithm=settings.JWT_ALGORITHM,
        )

    # -----------------------------------------------------------------------
    # Token creation
    # -----------------------------------------------------------------------

    def issue(
        self,
        subject: str,
        email: str,
        username: str,
        role: str,
        now: Optional[datetime] = None,
    ) -> str:
        """Sign and return an access token for the given identity.

        Args:
            subject:  Value for the 'sub' claim (the user id).
            email, username, role: Identity claims copied into the payload.
            now:      Issue time; defaults to the current UTC time.

        Returns:
            Signed JWT string expiring ``lifetime_seconds`` after ``now``.
        """
        issued_at = int((now or datetime.now(timezone.utc)).timestamp())

        payload: Dict[str, Any] = {
            "sub": subject,
            "email": email,
            "username": username,
            "role": role.value if hasattr(role, "value") else role,
            "jti": str(uuid.uuid4()),
            "iat": issued_at,
            "exp": issued_at + self.lifetime_seconds,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    # -----------------------------------------------------------------------
    # Token verification
    # -----------------------------------------------------------------------

    def decode(self, token: str) -> IdentityClaims:
        """Verify a token and return its identity claims.

        Raises:
            MalformedTokenError:   token cannot be parsed or lacks identity claims.
            InvalidSignatureError: signature does not match our key.
            ExpiredTokenError:     the 'exp' instant has been reached.
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedTokenError() from exc

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except JWTError as exc:
            raise InvalidSignatureError() from exc

        if any(not payload.get(claim) for claim in _IDENTITY_CLAIMS) or "exp" not in payload:
            raise MalformedTokenError("Token is missing identity claims")

        # jose truncates 'now' to whole seconds; expiry must match revocation cleanup
        try:
            expired = datetime.now(timezone.utc).timestamp() >= float(payload["exp"])
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError() from exc
        if expired:
            raise ExpiredTokenError()

        try:
            return IdentityClaims(
                sub=str(payload["sub"]),
                email=payload["email"],
                username=payload["username"],
                role=payload["role"],
                iat=_to_datetime(payload.get("iat", payload["exp"])),
                exp=_to_datetime(payload["exp"]),
                jti=payload.get("jti", ""),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError() from exc

    def read_expiry(self, token: str) -> Optional[datetime]:
        """Return the token's 'exp' claim WITHOUT verifying its signature.

        Only meant for housekeeping (revocation cleanup). Returns None when
        the token cannot be decoded or carries no usable expiry.
        """
        try:
            claims = jwt.get_unverified_claims(token)
            return _to_datetime(claims["exp"])
        except (JWTError, KeyError, TypeError, ValueError, OverflowError, OSError):
            return None
