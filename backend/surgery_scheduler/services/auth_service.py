"""
Authentication Service: bearer tokens as the identity substrate.

A token's `sub` claim is the principal value; the scheduling core only
ever sees the resulting Principal.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt

from surgery_scheduler.config import config
from surgery_scheduler.core.principal import Principal


class AuthService:
    """Issues and validates principal access tokens."""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
    ):
        self.jwt_secret = secret or config.JWT_SECRET
        self.jwt_algorithm = algorithm or config.JWT_ALGORITHM
        self.expire_minutes = expire_minutes or config.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_access_token(self, principal: Principal) -> str:
        """Create a short-lived access token."""
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": principal.value,
            "exp": expire,
            "type": "access",
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def decode_token(self, token: str) -> Optional[dict]:
        """Decode and validate a JWT token."""
        try:
            return jwt.decode(token, self.jwt_secret, algorithms=[self.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    def principal_from_token(self, token: str) -> Optional[Principal]:
        payload = self.decode_token(token)
        if not payload or payload.get("type") != "access" or not payload.get("sub"):
            return None
        return Principal(payload["sub"])


_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get the shared AuthService instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
