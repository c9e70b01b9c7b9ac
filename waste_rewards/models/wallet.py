from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import CheckConstraint

from ..utils import utcnow

if TYPE_CHECKING:
    from .user import User

POINTS_PER_LEVEL = 1000


def level_for(points: int) -> int:
    return max(1, points // POINTS_PER_LEVEL + 1)


class Wallet(SQLModel, table=True):
    """A user's spendable points balance. Exactly one per user."""

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_wallet_points_nonnegative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True)
    points: int = Field(default=0)
    # bumped on every balance write; writers compare-and-set on it
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    user: "User" = Relationship(back_populates="wallet")

    @property
    def level(self) -> int:
        return level_for(self.points)
