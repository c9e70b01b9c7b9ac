from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..config import settings
from ..exceptions import (
    InvalidStatusTransitionError,
    PreconditionFailedError,
    ReportAlreadyCollectedError,
    ReportNotFoundError,
)
from ..models import CollectedWaste, Report, ReportStatus, TERMINAL_STATUSES, TransactionType
from ..schemas.reports import CollectionOutcome, CollectionTask
from ..utils import format_date
from . import ledger
from .accounts import get_user
from .notifications import notify
from .verification import WasteVerifier

log = logging.getLogger(__name__)


def _get_report(session: Session, report_id: int) -> Report:
    report = session.get(Report, report_id)
    if report is None:
        raise ReportNotFoundError(report_id)
    return report


def _required(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise PreconditionFailedError(f"{field} is required")
    return value


def create_report(
    session: Session,
    user_id: int,
    location: str,
    waste_type: str,
    amount: str,
    image_url: Optional[str] = None,
    verification_result: Optional[dict[str, Any]] = None,
) -> Report:
    """File a pending report and credit the reporter in the same commit."""
    get_user(session, user_id)
    report = Report(
        user_id=user_id,
        location=_required(location, "Location"),
        waste_type=_required(waste_type, "Waste type"),
        amount=_required(amount, "Amount"),
        image_url=image_url,
        verification_result=verification_result,
        status=ReportStatus.PENDING,
    )
    # settle the wallet first so a creation race cannot roll back the report
    ledger.get_or_create_wallet(session, user_id)

    points = settings.REPORT_REWARD_POINTS
    session.add(report)
    ledger.credit(
        session, user_id, points, TransactionType.EARNED_REPORT,
        "Points earned for reporting waste", commit=False,
    )
    session.commit()
    session.refresh(report)
    log.info("Report %s filed by user %s", report.id, user_id)

    notify(session, user_id, f"You've earned {points} points for reporting waste!", "reward")
    return report


def get_recent_reports(session: Session, limit: int = 10) -> list[Report]:
    return list(
        session.exec(
            select(Report).order_by(Report.created_at.desc(), Report.id.desc()).limit(limit)
        ).all()
    )


def get_collection_tasks(session: Session, limit: int = 20) -> list[CollectionTask]:
    reports = session.exec(
        select(Report).order_by(Report.created_at.desc(), Report.id.desc()).limit(limit)
    ).all()
    return [
        CollectionTask(
            id=r.id,
            location=r.location,
            waste_type=r.waste_type,
            amount=r.amount,
            status=r.status.value,
            date=format_date(r.created_at),
            collector_id=r.collector_id,
        )
        for r in reports
    ]


def claim_task(session: Session, report_id: int, collector_id: int) -> Report:
    """pending -> in_progress, recording who is collecting."""
    get_user(session, collector_id)
    report = _get_report(session, report_id)
    if report.status in TERMINAL_STATUSES:
        raise ReportAlreadyCollectedError(report.id, report.status.value)
    if report.status != ReportStatus.PENDING:
        raise InvalidStatusTransitionError("Report is already being collected")

    report.status = ReportStatus.IN_PROGRESS
    report.collector_id = collector_id
    session.add(report)
    session.commit()
    session.refresh(report)
    log.info("Report %s claimed by collector %s", report.id, collector_id)
    return report


def update_task_status(
    session: Session,
    report_id: int,
    new_status: ReportStatus | str,
    collector_id: Optional[int] = None,
) -> Report:
    """
    Manual status changes. Only pending -> in_progress and
    in_progress -> completed are allowed; verified is reached through
    ``verify_collection`` alone.
    """
    try:
        new_status = ReportStatus(new_status)
    except ValueError:
        raise InvalidStatusTransitionError(f"Unknown status: {new_status}") from None

    if new_status == ReportStatus.IN_PROGRESS:
        if collector_id is None:
            raise InvalidStatusTransitionError("A collector is required to start a collection")
        return claim_task(session, report_id, collector_id)

    if new_status != ReportStatus.COMPLETED:
        raise InvalidStatusTransitionError(f"Cannot move a report to {new_status.value} manually")

    report = _get_report(session, report_id)
    if report.status in TERMINAL_STATUSES:
        raise ReportAlreadyCollectedError(report.id, report.status.value)
    if report.status != ReportStatus.IN_PROGRESS:
        raise InvalidStatusTransitionError("Only reports in progress can be completed")
    if collector_id is not None and report.collector_id != collector_id:
        raise InvalidStatusTransitionError("Report is being collected by another collector")

    report.status = ReportStatus.COMPLETED
    session.add(report)
    session.commit()
    session.refresh(report)
    return report


def verify_collection(
    session: Session,
    report_id: int,
    collector_id: int,
    image: bytes,
    mime_type: str,
    verifier: WasteVerifier,
    *,
    threshold: Optional[float] = None,
) -> CollectionOutcome:
    """
    Check the collector's photo and, on a confident match, mark the report
    verified, record the collection and credit the collector. All three
    writes commit together; a report already verified or completed is
    rejected before the verifier is called.
    """
    threshold = settings.VERIFICATION_CONFIDENCE_THRESHOLD if threshold is None else threshold
    report = _get_report(session, report_id)
    if report.status in TERMINAL_STATUSES:
        log.warning("Report %s is already in %s status", report.id, report.status.value)
        raise ReportAlreadyCollectedError(report.id, report.status.value)
    if report.status != ReportStatus.IN_PROGRESS:
        raise InvalidStatusTransitionError("Start the collection before verifying it")
    if report.collector_id != collector_id:
        raise InvalidStatusTransitionError("Report is being collected by another collector")
    if not image:
        raise PreconditionFailedError("A photo of the collected waste is required")

    result = verifier.verify(image, mime_type, report.waste_type)
    if not result.passes(threshold):
        log.info(
            "Report %s failed verification (match=%s, confidence=%.2f)",
            report.id, result.waste_type_match, result.confidence,
        )
        return CollectionOutcome(
            report_id=report.id,
            status=report.status.value,
            waste_type_match=result.waste_type_match,
            confidence=result.confidence,
        )

    ledger.get_or_create_wallet(session, collector_id)
    points = settings.COLLECT_REWARD_POINTS

    report.status = ReportStatus.VERIFIED
    session.add(report)
    collected = CollectedWaste(
        report_id=report.id,
        collector_id=collector_id,
        status=ReportStatus.VERIFIED.value,
        verification_result=result.as_record(),
    )
    session.add(collected)
    try:
        ledger.credit(
            session, collector_id, points, TransactionType.EARNED_COLLECT,
            "Points earned for collecting waste", commit=False,
        )
        session.commit()
    except IntegrityError:
        # unique(report_id): a concurrent verification got there first
        session.rollback()
        raise ReportAlreadyCollectedError(report_id, ReportStatus.VERIFIED.value) from None
    session.refresh(collected)
    log.info("Report %s verified by collector %s", report_id, collector_id)

    notify(session, collector_id, f"You've earned {points} points for collecting waste!", "reward")
    return CollectionOutcome(
        report_id=report_id,
        status=ReportStatus.VERIFIED.value,
        waste_type_match=result.waste_type_match,
        confidence=result.confidence,
        awarded_points=points,
        collected_waste_id=collected.id,
    )


def get_collected_wastes_by_collector(session: Session, collector_id: int) -> list[CollectedWaste]:
    return list(
        session.exec(
            select(CollectedWaste)
            .where(CollectedWaste.collector_id == collector_id)
            .order_by(CollectedWaste.collected_date.desc())
        ).all()
    )
