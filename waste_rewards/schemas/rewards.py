from datetime import datetime
from typing import Literal, Optional

from fastapi import Form
from pydantic import BaseModel, ConfigDict, Field


class RewardListing(BaseModel):
    """One row of the rewards page: the caller's own balance first, then catalog offers."""

    id: Optional[int] = None
    name: str
    cost: int
    description: Optional[str] = None
    collection_info: Optional[str] = None
    kind: Literal["balance", "offer"] = "offer"


class TransactionEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    amount: int
    description: Optional[str] = None
    date: str


class WalletRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    points: int
    level: int
    updated_at: datetime


class RewardOfferRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    collection_info: Optional[str] = None
    cost: int
    is_available: bool


class RewardOfferForm(BaseModel):
    name: str
    cost: int = Field(gt=0)
    description: Optional[str] = None
    collection_info: Optional[str] = None
    is_available: bool = True

    @classmethod
    def as_form(
        cls,
        name: str = Form(...),
        cost: int = Form(..., gt=0),
        description: Optional[str] = Form(None),
        collection_info: Optional[str] = Form(None),
        is_available: bool = Form(True),
    ):
        return cls(
            name=name,
            cost=cost,
            description=description,
            collection_info=collection_info,
            is_available=is_available,
        )
