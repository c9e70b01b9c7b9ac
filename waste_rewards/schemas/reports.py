from datetime import datetime
from typing import Any, Optional

from fastapi import Form
from pydantic import BaseModel, ConfigDict

from ..models.report import ReportStatus


class ReportForm(BaseModel):
    location: str
    waste_type: str
    amount: str
    image_url: Optional[str] = None

    @classmethod
    def as_form(
        cls,
        location: str = Form(...),
        waste_type: str = Form(...),
        amount: str = Form(...),
        image_url: Optional[str] = Form(None),
    ):
        return cls(location=location, waste_type=waste_type, amount=amount, image_url=image_url)


class ReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    collector_id: Optional[int] = None
    location: str
    waste_type: str
    amount: str
    status: ReportStatus
    image_url: Optional[str] = None
    verification_result: Optional[dict[str, Any]] = None
    created_at: datetime


class CollectionTask(BaseModel):
    id: int
    location: str
    waste_type: str
    amount: str
    status: str
    date: str
    collector_id: Optional[int] = None


class CollectedWasteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    report_id: int
    collector_id: int
    collected_date: datetime
    status: str
    verification_result: Optional[dict[str, Any]] = None


class CollectionOutcome(BaseModel):
    report_id: int
    status: str
    waste_type_match: bool
    confidence: float
    awarded_points: int = 0
    collected_waste_id: Optional[int] = None

    @property
    def verified(self) -> bool:
        return self.collected_waste_id is not None
