from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from .config import settings
from .db import get_session
from .models import User
from .security import decode_access_token
from .services.verification import WasteVerifier, get_verifier


def get_current_user(request: Request, session: Session = Depends(get_session)) -> Optional[User]:
    """Resolve the signed-in user from the session cookie, or None."""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        return None

    payload = decode_access_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    return session.get(User, int(user_id))


def require_user(current_user: Optional[User] = Depends(get_current_user)) -> User:
    """Dependency that ensures a user is authenticated."""
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return current_user


def verifier_dependency() -> WasteVerifier:
    return get_verifier()


def require_role(*roles: str):
    """Dependency factory that ensures a user has one of the required roles."""
    def role_checker(user: User = Depends(require_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
        return user
    return role_checker
