"""
Issues (problemas) service layer.

All database access for the ``/api/issues`` endpoints lives here, together
with the delay arithmetic shared by the board and the work-order detail.

Delay rule
----------
An issue with a delay window counts ``(end - start).days + 1`` days; a
window without an end date counts up to today.  Issues without a start date
contribute nothing.
"""

from __future__ import annotations

import datetime
import logging
from typing import Iterable

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload

from ot_dashboard.models.issue import Issue, IssueNote
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.models.work_order import WorkOrder
from ot_dashboard.schemas.issue import (
    IssueCreate,
    IssueNoteCreate,
    IssueNoteResponse,
    IssueResponse,
    IssueUpdate,
)
from ot_dashboard.utils.constants import ISSUE_OPEN

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Delay arithmetic
# ---------------------------------------------------------------------------


def calculate_delay_days(issue: Issue, today: datetime.date | None = None) -> int:
    if issue.delay_start_date is None:
        return 0
    end = issue.delay_end_date or today or datetime.date.today()
    return (end - issue.delay_start_date).days + 1


def total_delay(issues: Iterable[Issue], today: datetime.date | None = None) -> int:
    """Sum the delay of every issue, open or resolved."""
    return sum(calculate_delay_days(issue, today) for issue in issues)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _user_email(user: Usuario | None) -> str | None:
    return user.email if user is not None else None


def _build_response(issue: Issue) -> IssueResponse:
    notes = [build_note_response(note) for note in (issue.notes or [])]
    return IssueResponse(
        id=issue.id,
        work_order_id=issue.work_order_id,
        stage=issue.stage,
        title=issue.title,
        description=issue.description,
        priority=issue.priority,
        status=issue.status,
        delay_start_date=issue.delay_start_date,
        delay_end_date=issue.delay_end_date,
        delay_days=calculate_delay_days(issue),
        created_at=issue.created_at,
        updated_at=issue.updated_at,
        notes=notes,
    )


def _get_issue(db: Session, issue_id: int) -> Issue:
    issue: Issue | None = db.query(Issue).filter(Issue.id == issue_id).first()
    if issue is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Problema con ID {issue_id} no encontrado.",
        )
    return issue


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


def list_issues(
    db: Session,
    work_order_id: int | None = None,
    estado: str | None = None,
) -> list[IssueResponse]:
    """Return issues, newest first, optionally narrowed to one work order or state."""
    q = db.query(Issue).options(
        selectinload(Issue.notes).selectinload(IssueNote.usuario)
    )
    if work_order_id is not None:
        q = q.filter(Issue.work_order_id == work_order_id)
    if estado is not None:
        q = q.filter(Issue.status == estado)
    rows = q.order_by(Issue.created_at.desc(), Issue.id.desc()).all()
    return [_build_response(row) for row in rows]


def get_issue(db: Session, issue_id: int) -> IssueResponse:
    return _build_response(_get_issue(db, issue_id))


# ---------------------------------------------------------------------------
# Write operations
# ---------------------------------------------------------------------------


def create_issue(db: Session, data: IssueCreate, user: Usuario) -> Issue:
    """Raise a new OPEN issue against a work order.

    Raises:
        HTTPException 404: If the work order does not exist.
    """
    if not db.query(WorkOrder).filter(WorkOrder.id == data.work_order_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"OT con ID {data.work_order_id} no encontrada.",
        )

    issue = Issue(
        work_order_id=data.work_order_id,
        stage=data.stage,
        title=data.title,
        description=data.description,
        priority=data.priority,
        status=ISSUE_OPEN,
        delay_start_date=data.delay_start_date,
        delay_end_date=data.delay_end_date,
        created_by=user.id,
    )
    db.add(issue)
    db.commit()
    db.refresh(issue)

    logger.info(
        "create_issue: id=%d work_order_id=%d priority=%s",
        issue.id, issue.work_order_id, issue.priority,
    )
    return issue


def update_issue(db: Session, issue_id: int, data: IssueUpdate) -> Issue:
    """Apply a partial update; only fields present in the payload are written.

    Raises:
        HTTPException 404: If the issue does not exist.
        HTTPException 422: If the resulting delay window ends before it starts.
    """
    issue = _get_issue(db, issue_id)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(issue, field, value)

    if (
        issue.delay_start_date is not None
        and issue.delay_end_date is not None
        and issue.delay_end_date < issue.delay_start_date
    ):
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="La fecha de término del retraso es anterior a la de inicio.",
        )

    db.commit()
    db.refresh(issue)

    logger.info("update_issue: id=%d fields=%s", issue_id, list(update_data.keys()))
    return issue


def add_note(db: Session, issue_id: int, data: IssueNoteCreate, user: Usuario) -> IssueNote:
    issue = _get_issue(db, issue_id)
    note = IssueNote(issue_id=issue.id, content=data.content, created_by=user.id)
    db.add(note)
    db.commit()
    db.refresh(note)

    logger.info("add_note: issue_id=%d note_id=%d", issue_id, note.id)
    return note


def build_note_response(note: IssueNote) -> IssueNoteResponse:
    return IssueNoteResponse(
        id=note.id,
        issue_id=note.issue_id,
        content=note.content,
        created_at=note.created_at,
        user_email=_user_email(note.usuario),
    )
