from typing import Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import CheckConstraint

from ..utils import utcnow

if TYPE_CHECKING:
    from .user import User


class TransactionType(str, Enum):
    EARNED_REPORT = "earned_report"
    EARNED_COLLECT = "earned_collect"
    REDEEMED = "redeemed"

    @property
    def is_credit(self) -> bool:
        return self is not TransactionType.REDEEMED


EARNED_TYPES = (TransactionType.EARNED_REPORT, TransactionType.EARNED_COLLECT)


class Transaction(SQLModel, table=True):
    """Append-only audit row for one balance change; sign is implied by ``type``."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    type: TransactionType
    amount: int
    description: Optional[str] = None
    date: datetime = Field(default_factory=utcnow, index=True)

    user: "User" = Relationship(back_populates="transactions")
