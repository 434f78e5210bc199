"""Authentication router: registration and email/password login"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from instalike.core.security import CredentialService
from instalike.db.session import get_db
from instalike.deps import get_credential_service
from instalike.modules.auth.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from instalike.modules.auth.services.auth import authenticate_user, register_user

router = APIRouter()

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service),
    user_in: RegisterRequest,
) -> AuthResponse:
    """Create an account and return a bearer token for it"""
    return register_user(db, credentials, user_in)

@router.post("/login", response_model=AuthResponse)
def login(
    *,
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service),
    login_in: LoginRequest,
) -> AuthResponse:
    """Exchange email and password for a bearer token"""
    return authenticate_user(db, credentials, login_in.email, login_in.password)
