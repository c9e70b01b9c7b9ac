from typing import List

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlmodel import Session

from waste_rewards.config import settings
from waste_rewards.db import get_session
from waste_rewards.dependencies import require_user, verifier_dependency
from waste_rewards.exceptions import PreconditionFailedError
from waste_rewards.models import User
from waste_rewards.schemas.reports import CollectedWasteRead, CollectionOutcome, CollectionTask, ReportRead
from waste_rewards.services import collection
from waste_rewards.services.verification import WasteVerifier

router = APIRouter()


@router.get("/tasks", response_model=List[CollectionTask])
def tasks(
    limit: int = Query(settings.COLLECTION_TASKS_LIMIT, ge=1, le=100),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return collection.get_collection_tasks(session, limit=limit)


@router.post("/tasks/{report_id}/claim", response_model=ReportRead)
def claim(
    report_id: int,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return collection.claim_task(session, report_id, current_user.id)


@router.post("/tasks/{report_id}/status", response_model=ReportRead)
def change_status(
    report_id: int,
    new_status: str = Form(..., alias="status"),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return collection.update_task_status(session, report_id, new_status, collector_id=current_user.id)


@router.post("/tasks/{report_id}/verify", response_model=CollectionOutcome)
def verify(
    report_id: int,
    image: UploadFile = File(...),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
    verifier: WasteVerifier = Depends(verifier_dependency),
):
    payload = image.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(payload) > settings.MAX_UPLOAD_BYTES:
        raise PreconditionFailedError(f"Photo must be at most {settings.MAX_UPLOAD_BYTES} bytes")
    return collection.verify_collection(
        session,
        report_id,
        current_user.id,
        payload,
        image.content_type or "image/jpeg",
        verifier,
    )


@router.get("/mine", response_model=List[CollectedWasteRead])
def my_collections(current_user: User = Depends(require_user), session: Session = Depends(get_session)):
    return collection.get_collected_wastes_by_collector(session, current_user.id)
