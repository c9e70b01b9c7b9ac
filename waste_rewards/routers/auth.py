from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from waste_rewards.config import settings
from waste_rewards.db import get_session
from waste_rewards.dependencies import require_user
from waste_rewards.exceptions import PreconditionFailedError
from waste_rewards.models import User
from waste_rewards.schemas.auth import SignInForm, UserRead
from waste_rewards.security import create_access_token
from waste_rewards.services.accounts import get_or_create_user

router = APIRouter()


@router.post("/session", response_model=UserRead)
def sign_in(
    response: Response,
    form_data: SignInForm = Depends(SignInForm.as_form),
    session: Session = Depends(get_session),
):
    # The identity provider has already authenticated this email.
    if "@" not in form_data.email:
        raise PreconditionFailedError("A valid email address is required")
    user, _ = get_or_create_user(session, form_data.email, form_data.name)
    token = create_access_token({"sub": str(user.id), "email": user.email})
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return user


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(require_user)):
    return current_user


@router.post("/logout")
def logout():
    response = Response(status_code=status.HTTP_303_SEE_OTHER)
    response.headers["Location"] = "/"
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return response
