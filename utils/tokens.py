"""
JWT issuing and verification via PyJWT.

Access tokens carry {sub, email, role}; refresh tokens carry {sub} only.
Both also carry type, jti, iat, exp and iss. verify() returns a Claims
object or raises an InvalidTokenError subclass, keeping "expired" apart
from "malformed / bad signature".
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from models.role import Role
from utils.security import generate_jti

ACCESS = "access"
REFRESH = "refresh"


class InvalidTokenError(Exception):
    """Token could not be verified."""


class TokenExpiredError(InvalidTokenError):
    pass


class MalformedTokenError(InvalidTokenError):
    """Bad signature, bad shape, or wrong token type."""


@dataclass(frozen=True)
class Claims:
    id: int
    token_type: str
    jti: str
    issued_at: datetime
    expires_at: datetime
    email: Optional[str] = None
    role: Optional[Role] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:

    def __init__(self, secret: str, algorithm: str = "HS256",
                 access_ttl: timedelta = timedelta(hours=1),
                 refresh_ttl: timedelta = timedelta(days=1),
                 issuer: str = "characters-api"):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.issuer = issuer

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            secret=config["JWT_SECRET"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            access_ttl=config.get("ACCESS_TOKEN_EXPIRES", timedelta(hours=1)),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", timedelta(days=1)),
            issuer=config.get("JWT_ISSUER", "characters-api"),
        )

    @property
    def max_ttl(self) -> timedelta:
        return max(self.access_ttl, self.refresh_ttl)

    def _encode(self, subject: int, token_type: str, ttl: timedelta, extra: Dict[str, Any]) -> str:
        now = _now()
        payload = {
            "iss": self.issuer,
            "sub": str(subject),
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "type": token_type,
            "jti": generate_jti(),
        }
        payload.update(extra)
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def issue_access_token(self, user) -> str:
        return self._encode(user.id, ACCESS, self.access_ttl,
                            {"email": user.email, "role": Role(user.role).value})

    def issue_refresh_token(self, user_id: int) -> str:
        return self._encode(user_id, REFRESH, self.refresh_ttl, {})

    def verify(self, token: str, expected_type: Optional[str] = None,
               allow_expired: bool = False) -> Claims:
        """
        Decode and validate a JWT. Raises TokenExpiredError past expiry and
        MalformedTokenError on anything else, including a type mismatch.
        allow_expired skips only the expiry check; the signature is always
        verified.
        """
        try:
            decoded = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"], "verify_exp": not allow_expired},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(f"Invalid token: {exc}") from exc

        token_type = decoded.get("type")
        if expected_type and token_type != expected_type:
            raise MalformedTokenError("Wrong token type")
        try:
            user_id = int(decoded["sub"])
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError("Invalid subject") from exc

        return Claims(
            id=user_id,
            token_type=token_type,
            jti=decoded.get("jti", ""),
            issued_at=datetime.fromtimestamp(decoded["iat"], timezone.utc),
            expires_at=datetime.fromtimestamp(decoded["exp"], timezone.utc),
            email=decoded.get("email"),
            role=Role.parse(decoded.get("role")),
        )
