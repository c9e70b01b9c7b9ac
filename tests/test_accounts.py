import pytest
from sqlmodel import Session

from waste_rewards.exceptions import PreconditionFailedError, UserNotFoundError
from waste_rewards.services.accounts import get_or_create_user, get_user, get_user_by_email, rename_user


def test_get_or_create_user_is_keyed_by_email(session: Session):
    user, created = get_or_create_user(session, "Sam@Example.com ", "Sam")
    again, created_again = get_or_create_user(session, "sam@example.com", "Samantha")

    assert created and not created_again
    assert again.id == user.id
    assert again.name == "Sam"
    assert get_user_by_email(session, "SAM@example.com").id == user.id


def test_blank_name_falls_back(session: Session):
    user, _ = get_or_create_user(session, "nobody@example.com", "  ")
    assert user.name == "Anonymous User"


def test_only_name_changes(session: Session):
    user, _ = get_or_create_user(session, "sam@example.com", "Sam")
    renamed = rename_user(session, user.id, " Samuel ")

    assert renamed.name == "Samuel"
    assert renamed.email == "sam@example.com"
    with pytest.raises(UserNotFoundError):
        get_user(session, 404)


def test_rename_rejects_blank_name(session: Session):
    user, _ = get_or_create_user(session, "sam@example.com", "Sam")
    with pytest.raises(PreconditionFailedError):
        rename_user(session, user.id, "   ")

    session.refresh(user)
    assert user.name == "Sam"
