from typing import Any, Optional
from datetime import datetime
from enum import Enum
from sqlmodel import Field, SQLModel
from sqlalchemy import JSON, Column

from ..utils import utcnow


class ReportStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    VERIFIED = "verified"


TERMINAL_STATUSES = (ReportStatus.VERIFIED, ReportStatus.COMPLETED)


class Report(SQLModel, table=True):
    __tablename__ = "reports"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    collector_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    location: str
    waste_type: str
    amount: str
    status: ReportStatus = Field(default=ReportStatus.PENDING, index=True)
    image_url: Optional[str] = None
    verification_result: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)


class CollectedWaste(SQLModel, table=True):
    __tablename__ = "collected_wastes"

    id: Optional[int] = Field(default=None, primary_key=True)
    report_id: int = Field(foreign_key="reports.id", unique=True)
    collector_id: int = Field(foreign_key="users.id", index=True)
    collected_date: datetime = Field(default_factory=utcnow)
    status: str = "verified"
    verification_result: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
