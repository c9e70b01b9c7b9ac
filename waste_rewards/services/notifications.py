from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..exceptions import NotificationNotFoundError
from ..models import Notification

log = logging.getLogger(__name__)


def notify(session: Session, user_id: int, message: str, type: str = "reward") -> Optional[Notification]:
    """
    Queue a notification for the user. Fire-and-forget: a storage failure is
    logged and rolled back, never raised, so callers must not depend on it.
    """
    notification = Notification(user_id=user_id, message=message, type=type)
    try:
        session.add(notification)
        session.commit()
        session.refresh(notification)
    except SQLAlchemyError:
        session.rollback()
        log.exception("Error creating notification for user %s", user_id)
        return None
    return notification


def get_unread_notifications(session: Session, user_id: int) -> list[Notification]:
    return list(
        session.exec(
            select(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        ).all()
    )


def mark_notification_as_read(session: Session, user_id: int, notification_id: int) -> Notification:
    notification = session.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotificationNotFoundError(notification_id)
    if not notification.is_read:
        notification.is_read = True
        session.add(notification)
        session.commit()
        session.refresh(notification)
    return notification
