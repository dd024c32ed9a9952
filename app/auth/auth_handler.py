"""
Password hashing and session token handling for the hospital backend
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
import logging

from passlib.context import CryptContext
from jose import JWTError, jwt

from app import config
from app.utils.error_handler import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)


class AuthHandler:
    """Hashes passwords and issues/verifies signed session tokens"""

    def __init__(self):
        self.pwd_context = pwd_context

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.pwd_context.hash(password)

    def verify_against_dummy(self, plain_password: str) -> bool:
        """Spend the same time as a real check when there is no stored hash"""
        self.verify_password(plain_password, _dummy_hash())
        return False

    def create_access_token(self, user_id, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed token identifying the user"""
        issued_at = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = token_lifetime()

        to_encode = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + expires_delta,
        }
        return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)

    def verify_token(self, token: str) -> dict:
        """Verify signature and expiry, returning the claims"""
        try:
            payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        except JWTError as e:
            logger.info(f"Rejected session token: {e}")
            raise AuthenticationError("Json Web Token is invalid, Try again!")

        if not payload.get("sub"):
            raise AuthenticationError("Json Web Token is invalid, Try again!")
        return payload


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return pwd_context.hash("dummy-password-for-timing")


def token_lifetime() -> timedelta:
    return timedelta(days=config.TOKEN_EXPIRE_DAYS)


auth_handler = AuthHandler()
