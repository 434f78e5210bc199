from typing import FrozenSet, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from instalike.core.exceptions import AuthError, InvalidTokenError
from instalike.core.security import CredentialService
from instalike.core.storage import ImageStorage
from instalike.db.session import get_db
from instalike.modules.user_management.models.user import User
from instalike.modules.user_management.services.user import get_user

# auto_error is off so a missing token goes through the AuthError handler
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage


async def get_form_fields(request: Request) -> FrozenSet[str]:
    """
    Names of the fields present in the submitted form. FastAPI hands an
    empty form value to the route as its default, so this is how a field
    sent blank is told apart from one left out.
    """
    form = await request.form()
    return frozenset(form.keys())


def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
    credentials: CredentialService = Depends(get_credential_service),
) -> User:
    """
    Dependency for getting current authenticated user
    """
    if not token:
        raise AuthError("Authentication required")

    token_data = credentials.verify_token(token)

    user = get_user(db, user_id=token_data.id)
    if not user:
        # Signed for an account that no longer exists
        raise InvalidTokenError("Could not validate credentials")

    return user
