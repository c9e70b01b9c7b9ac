from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlmodel import Field, SQLModel, Relationship

from ..utils import utcnow

if TYPE_CHECKING:
    from .user import User


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    type: str
    message: str
    is_read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow)

    user: "User" = Relationship(back_populates="notifications")
