from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from waste_rewards.db import get_session
from waste_rewards.dependencies import require_user
from waste_rewards.models import User
from waste_rewards.schemas.reports import ReportForm, ReportRead
from waste_rewards.services import collection

router = APIRouter()


@router.post("/", response_model=ReportRead, status_code=status.HTTP_201_CREATED)
def create_report(
    form_data: ReportForm = Depends(ReportForm.as_form),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return collection.create_report(
        session,
        current_user.id,
        location=form_data.location,
        waste_type=form_data.waste_type,
        amount=form_data.amount,
        image_url=form_data.image_url,
    )


@router.get("/recent", response_model=List[ReportRead])
def recent_reports(
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return collection.get_recent_reports(session, limit=limit)
