import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from instalike.core.exceptions import AuthError, ConflictError, StoreError
from instalike.core.security import CredentialService
from instalike.modules.auth.schemas.auth import AuthResponse, RegisterRequest
from instalike.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "Username or email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(User.email == email).first()


def _issue_token(credentials: CredentialService, user: User) -> AuthResponse:
    token = credentials.create_access_token(user.id, user.username)
    return AuthResponse(token=token, id=user.id, username=user.username)


def register_user(db: Session, credentials: CredentialService, user_in: RegisterRequest) -> AuthResponse:
    """Create an account and issue its first token"""
    try:
        existing = (
            db.query(User.id)
            .filter(or_(User.username == user_in.username, User.email == user_in.email))
            .first()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error checking existing user: {e}")
        raise StoreError("Database error while checking username or email")

    if existing:
        logger.info(f"Registration rejected, username or email taken: {user_in.username}")
        raise ConflictError(DUPLICATE_USER_MESSAGE)

    user = User(
        username=user_in.username,
        email=user_in.email,
        hashed_password=credentials.hash_password(user_in.password),
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # A concurrent registration claimed the name between check and insert
        db.rollback()
        logger.info(f"Registration lost a race on unique constraint: {user_in.username}")
        raise ConflictError(DUPLICATE_USER_MESSAGE)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during registration: {e}")
        raise StoreError("Registration failed")

    logger.info(f"User registered successfully: {user.username} (id={user.id})")
    return _issue_token(credentials, user)


def authenticate_user(db: Session, credentials: CredentialService, email: str, password: str) -> AuthResponse:
    """
    Check an email/password pair and issue a token.

    Unknown email and wrong password produce the same error so the response
    cannot be used to discover registered addresses.
    """
    try:
        user = get_user_by_email(db, email)
    except SQLAlchemyError as e:
        logger.error(f"Database error during login: {e}")
        raise StoreError()

    if not user or not credentials.verify_password(password, user.hashed_password):
        logger.info("Invalid email or password")
        raise AuthError(INVALID_CREDENTIALS_MESSAGE)

    logger.info(f"User logged in successfully: {user.username}")
    return _issue_token(credentials, user)
