from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from sqlmodel import Field, SQLModel, Relationship

from ..utils import utcnow

if TYPE_CHECKING:
    from .wallet import Wallet
    from .transaction import Transaction
    from .notification import Notification


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str
    role: str = "user"
    created_at: datetime = Field(default_factory=utcnow)

    wallet: Optional["Wallet"] = Relationship(back_populates="user", sa_relationship_kwargs={"uselist": False})
    transactions: List["Transaction"] = Relationship(back_populates="user")
    notifications: List["Notification"] = Relationship(back_populates="user")

    def __repr__(self):
        return f"<User id={self.id} {self.email}>"
