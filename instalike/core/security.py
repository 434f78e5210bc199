# Implements security-related functionality:
# JWT token generation and verification
# Password hashing and verification using bcrypt
# Everything is configured through the CredentialService constructor so the
# signing key never lives in module state.

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel

from instalike.core.config import Settings
from instalike.core.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Identity embedded in an access token"""
    id: int
    username: str


class CredentialService:
    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60 * 24 * 7,
        password_hash_rounds: int = 10,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=password_hash_rounds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialService":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            password_hash_rounds=settings.PASSWORD_HASH_ROUNDS,
        )

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def create_access_token(
        self, user_id: int, username: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.access_token_expire_minutes)
        expire = datetime.now(timezone.utc) + expires_delta

        to_encode = {"sub": str(user_id), "username": username, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> TokenPayload:
        """
        Decode a bearer token and return the identity it carries.

        Raises InvalidTokenError for a malformed token, a bad signature, an
        expired token or a payload without the identity claims. python-jose
        checks "exp" during decode.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"JWT verification error: {e}")
            raise InvalidTokenError()

        sub = payload.get("sub")
        username = payload.get("username")
        if sub is None or username is None:
            logger.warning("Token payload missing 'sub' or 'username' field")
            raise InvalidTokenError()

        try:
            return TokenPayload(id=int(sub), username=username)
        except ValueError:
            logger.warning(f"Token subject is not a user id: {sub!r}")
            raise InvalidTokenError()
