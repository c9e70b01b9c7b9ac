from typing import Optional
from datetime import datetime
from sqlmodel import Field, SQLModel
from sqlalchemy import CheckConstraint

from ..utils import utcnow


class RewardOffer(SQLModel, table=True):
    """A catalog item users can exchange points for."""

    __tablename__ = "reward_offers"
    __table_args__ = (
        CheckConstraint("cost > 0", name="ck_reward_offer_cost_positive"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    description: Optional[str] = None
    collection_info: Optional[str] = None
    cost: int
    is_available: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)
