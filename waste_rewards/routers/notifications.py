from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from waste_rewards.db import get_session
from waste_rewards.dependencies import require_user
from waste_rewards.models import User
from waste_rewards.schemas.notifications import NotificationRead
from waste_rewards.services import notifications

router = APIRouter()


@router.get("/unread", response_model=List[NotificationRead])
def unread(current_user: User = Depends(require_user), session: Session = Depends(get_session)):
    return notifications.get_unread_notifications(session, current_user.id)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: int,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return notifications.mark_notification_as_read(session, current_user.id, notification_id)
