from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..exceptions import PreconditionFailedError, UserNotFoundError
from ..models import User

log = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == normalize_email(email))).first()


def get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def get_or_create_user(session: Session, email: str, name: str) -> tuple[User, bool]:
    """
    Return the account for ``email``, creating it on first sign-in.
    Returns (user, created). An existing account is returned untouched.
    """
    existing = get_user_by_email(session, email)
    if existing:
        log.warning("User with email %s already exists.", existing.email)
        return existing, False

    user = User(email=normalize_email(email), name=name.strip() or "Anonymous User")
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # another sign-in for the same email won the insert
        session.rollback()
        return get_user_by_email(session, email), False
    session.refresh(user)
    log.info("Created user %s (%s)", user.id, user.email)
    return user, True


def rename_user(session: Session, user_id: int, name: str) -> User:
    name = name.strip()
    if not name:
        raise PreconditionFailedError("Name cannot be blank")
    user = get_user(session, user_id)
    user.name = name
    session.add(user)
    session.commit()
    session.refresh(user)
    return user
