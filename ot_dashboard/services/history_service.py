"""
History service layer.

Two read models are built from the audit tables:

- ``get_work_order_history`` — everything that happened to one OT: field
  changes, issues raised against it and the notes on those issues, merged
  and sorted newest first.
- ``get_change_history`` — the most recent field changes across all OTs,
  leaving out the derived ``status``/``progress`` fields that every date
  confirmation rewrites.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session, selectinload

from ot_dashboard.models.issue import Issue, IssueNote
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.models.work_order import WorkOrder
from ot_dashboard.models.work_order_history import WorkOrderHistory
from ot_dashboard.schemas.history import ChangeHistoryItem, HistoryEntry
from ot_dashboard.services.work_order_service import get_work_order
from ot_dashboard.utils.constants import CAMPOS_DERIVADOS

logger = logging.getLogger(__name__)


def get_work_order_history(db: Session, work_order_id: int) -> list[HistoryEntry]:
    """Return the merged history of one work order, newest first.

    Raises:
        HTTPException 404: If the work order does not exist.
    """
    work_order = get_work_order(db, work_order_id)

    changes = (
        db.query(WorkOrderHistory)
        .options(selectinload(WorkOrderHistory.usuario))
        .filter(WorkOrderHistory.work_order_id == work_order.id)
        .all()
    )
    issues = (
        db.query(Issue)
        .options(selectinload(Issue.notes).selectinload(IssueNote.usuario))
        .filter(Issue.work_order_id == work_order.id)
        .all()
    )

    entries: list[tuple[HistoryEntry, int]] = []
    for change in changes:
        entries.append((
            HistoryEntry(
                type="status" if change.field == "status" else "date",
                timestamp=change.changed_at,
                description=f"{change.field}: {change.new_value}",
                old_value=change.old_value,
                new_value=change.new_value,
                user_email=change.usuario.email if change.usuario else None,
            ),
            change.id,
        ))

    for issue in issues:
        entries.append((
            HistoryEntry(
                type="issue",
                timestamp=issue.created_at,
                description=f"Nuevo problema: {issue.title}",
            ),
            0,
        ))
        for note in issue.notes:
            entries.append((
                HistoryEntry(
                    type="note",
                    timestamp=note.created_at,
                    description=note.content or "",
                    user_email=note.usuario.email if note.usuario else None,
                ),
                0,
            ))

    # Rows committed together share a timestamp; later ids win the tie
    entries.sort(key=lambda item: (item[0].timestamp, item[1]), reverse=True)
    return [entry for entry, _ in entries]


def get_change_history(db: Session, limit: int = 50) -> list[ChangeHistoryItem]:
    """Return the latest *limit* non-derived field changes across all OTs."""
    rows = (
        db.query(WorkOrderHistory, WorkOrder.ot, Usuario.email)
        .join(WorkOrder, WorkOrder.id == WorkOrderHistory.work_order_id)
        .outerjoin(Usuario, Usuario.id == WorkOrderHistory.changed_by)
        .filter(WorkOrderHistory.field.notin_(sorted(CAMPOS_DERIVADOS)))
        .order_by(WorkOrderHistory.changed_at.desc(), WorkOrderHistory.id.desc())
        .limit(limit)
        .all()
    )
    logger.debug("get_change_history: %d rows (limit=%d)", len(rows), limit)
    return [
        ChangeHistoryItem(
            id=change.id,
            work_order_id=change.work_order_id,
            ot=ot or "",
            field=change.field,
            old_value=change.old_value,
            new_value=change.new_value,
            changed_at=change.changed_at,
            email=email or "",
        )
        for change, ot, email in rows
    ]
