"""
Work-order (OT) service layer.

All database access for the ``/api/work-orders`` endpoints lives here.
Functions receive a SQLAlchemy ``Session`` and return ORM objects or schema
instances ready for serialisation by FastAPI.

Design notes
------------
- Stage dates are upserted: one row per ``(work_order_id, stage)``.
- After every stage-date write the full set of dates is handed to
  ``stage_resolver.resolve_stage_transition`` *before* the commit, so the
  date, the derived fields and their history rows land in one transaction.
- Archived orders still accept date edits, but only the audit columns
  (``updated_by``/``updated_at``) of the order are touched.
- Every changed field produces a ``WorkOrderHistory`` row; unchanged values
  are not logged.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import func

from ot_dashboard.models.usuario import Usuario
from ot_dashboard.models.work_order import WorkOrder
from ot_dashboard.models.work_order_date import WorkOrderDate
from ot_dashboard.models.work_order_history import WorkOrderHistory
from ot_dashboard.schemas.work_order import (
    StageDateInfo,
    StageDateUpdate,
    StageSchema,
    StagesResponse,
    WorkOrderBoard,
    WorkOrderCreate,
    WorkOrderResponse,
)
from ot_dashboard.services.issue_service import total_delay
from ot_dashboard.services.stage_resolver import (
    StageResolution,
    resolve_stage_transition,
    stages_for_location,
)
from ot_dashboard.utils.constants import (
    ANTI_STAGES,
    INCO_STAGES,
    LOCATION_ANTI,
    LOCATION_ARCHIVED,
    LOCATION_INCO,
    STATUS_SIN_INICIAR,
)

logger = logging.getLogger(__name__)

_ALL_STAGE_NAMES: frozenset[str] = frozenset(
    stage.name for stage in stages_for_location(None)
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def get_work_order(db: Session, work_order_id: int) -> WorkOrder:
    work_order: WorkOrder | None = (
        db.query(WorkOrder).filter(WorkOrder.id == work_order_id).first()
    )
    if work_order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"OT con ID {work_order_id} no encontrada.",
        )
    return work_order


def _get_by_ot(db: Session, ot: str) -> WorkOrder:
    work_order: WorkOrder | None = db.query(WorkOrder).filter(WorkOrder.ot == ot).first()
    if work_order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"OT {ot} no encontrada.",
        )
    return work_order


def _format_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_stage_date(row: WorkOrderDate | None) -> str | None:
    """Render a stage date for the history log, e.g. ``2026-03-02 (confirmada)``."""
    if row is None:
        return None
    text = row.date.isoformat() if row.date is not None else "sin fecha"
    return f"{text} (confirmada)" if row.confirmed else text


def _record_change(
    db: Session,
    work_order: WorkOrder,
    field: str,
    old_value: Any,
    new_value: Any,
    user_id: int | None,
) -> None:
    old_text, new_text = _format_value(old_value), _format_value(new_value)
    if old_text == new_text:
        return
    db.add(
        WorkOrderHistory(
            work_order_id=work_order.id,
            field=field,
            old_value=old_text,
            new_value=new_text,
            changed_by=user_id,
        )
    )


def _sort_key(work_order: WorkOrder) -> tuple[int, int]:
    # Priority orders first, then by descending progress
    return (0 if work_order.priority else 1, -(work_order.progress or 0))


def build_response(work_order: WorkOrder, today: datetime.date | None = None) -> WorkOrderResponse:
    """Construct a ``WorkOrderResponse`` from a ``WorkOrder`` ORM object.

    Only stage dates that actually carry a date appear in ``dates``.
    """
    dates = {
        row.stage: StageDateInfo(date=row.date, confirmed=bool(row.confirmed))
        for row in (work_order.dates or [])
        if row.date is not None
    }
    return WorkOrderResponse(
        id=work_order.id,
        ot=work_order.ot,
        client=work_order.client,
        description=work_order.description,
        tag=work_order.tag,
        location=work_order.location,
        status=work_order.status,
        progress=work_order.progress,
        priority=bool(work_order.priority),
        created_at=work_order.created_at,
        updated_at=work_order.updated_at,
        dates=dates,
        retraso_total=total_delay(work_order.issues or [], today),
    )


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


def get_stages() -> StagesResponse:
    return StagesResponse(
        inco=[StageSchema(name=s.name, progress=s.progress) for s in INCO_STAGES],
        anti=[StageSchema(name=s.name, progress=s.progress) for s in ANTI_STAGES],
    )


def load_work_orders(db: Session) -> list[WorkOrder]:
    """Return every work order with its dates and issues, newest first."""
    return (
        db.query(WorkOrder)
        .options(selectinload(WorkOrder.dates), selectinload(WorkOrder.issues))
        .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
        .all()
    )


def get_board(db: Session) -> WorkOrderBoard:
    """Load every work order and split them by location.

    Each list is ordered priority-first, then by descending progress; ties
    keep the newest-first load order.
    """
    board = WorkOrderBoard()
    buckets = {
        LOCATION_INCO: board.inco,
        LOCATION_ANTI: board.anti,
        LOCATION_ARCHIVED: board.archived,
    }
    for work_order in sorted(load_work_orders(db), key=_sort_key):
        bucket = buckets.get(work_order.location)
        if bucket is None:
            logger.warning(
                "get_board: OT %s has unknown location '%s'",
                work_order.ot, work_order.location,
            )
            continue
        bucket.append(build_response(work_order))

    logger.debug(
        "get_board: inco=%d anti=%d archived=%d",
        len(board.inco), len(board.anti), len(board.archived),
    )
    return board


def get_detalle(db: Session, work_order_id: int) -> WorkOrderResponse:
    return build_response(get_work_order(db, work_order_id))


# ---------------------------------------------------------------------------
# Write operations
# ---------------------------------------------------------------------------


def create_work_order(db: Session, data: WorkOrderCreate, user: Usuario) -> WorkOrder:
    """Create a new work order in the INCO line with no dates.

    Raises:
        HTTPException 409: If another work order already uses ``data.ot``.
    """
    ot = data.ot.strip()
    if db.query(WorkOrder).filter(WorkOrder.ot == ot).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Ya existe una OT con número {ot}.",
        )

    work_order = WorkOrder(
        ot=ot,
        client=data.client,
        description=data.description,
        tag=data.tag,
        location=LOCATION_INCO,
        status=STATUS_SIN_INICIAR,
        progress=0,
        priority=False,
        created_by=user.id,
        updated_by=user.id,
    )
    db.add(work_order)
    db.commit()
    db.refresh(work_order)

    logger.info("create_work_order: created OT %s (id=%d)", ot, work_order.id)
    return work_order


def _upsert_stage_date(
    db: Session,
    work_order: WorkOrder,
    data: StageDateUpdate,
    user_id: int,
) -> None:
    existing: WorkOrderDate | None = next(
        (row for row in work_order.dates if row.stage == data.stage), None
    )
    old_text = _format_stage_date(existing)

    if existing is None:
        existing = WorkOrderDate(
            stage=data.stage,
            date=data.date,
            confirmed=data.confirmed,
            created_by=user_id,
            updated_by=user_id,
        )
        work_order.dates.append(existing)
    else:
        existing.date = data.date
        existing.confirmed = data.confirmed
        existing.updated_by = user_id

    _record_change(db, work_order, data.stage, old_text, _format_stage_date(existing), user_id)


def apply_resolution(
    db: Session,
    work_order: WorkOrder,
    resolution: StageResolution,
    user_id: int,
) -> None:
    """Write the resolver's derived fields onto *work_order*, logging each change."""
    for field, value in resolution.as_update().items():
        _record_change(db, work_order, field, getattr(work_order, field), value, user_id)
        setattr(work_order, field, value)
    work_order.updated_by = user_id
    work_order.updated_at = func.now()


def update_stage_date(
    db: Session,
    ot: str,
    data: StageDateUpdate,
    user: Usuario,
) -> tuple[WorkOrder, StageResolution]:
    """Schedule or confirm a stage date and re-derive the order's state.

    Args:
        db: Active SQLAlchemy session.
        ot: Order number of the work order.
        data: Stage, date and confirmed flag of the write.
        user: Acting user, stored in the audit columns and history.

    Returns:
        The refreshed ``WorkOrder`` and the ``StageResolution`` applied to it.

    Raises:
        HTTPException 404: If no work order has number *ot*.
        HTTPException 422: If ``data.stage`` is not a configured stage.
    """
    if data.stage not in _ALL_STAGE_NAMES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Etapa desconocida '{data.stage}'.",
        )

    work_order = _get_by_ot(db, ot)
    try:
        _upsert_stage_date(db, work_order, data, user.id)
        db.flush()
    except IntegrityError:
        # Another writer inserted this (order, stage) row after we loaded the dates.
        db.rollback()
        logger.warning(
            "update_stage_date: concurrent insert of ot=%s stage=%s, retrying as update",
            ot, data.stage,
        )
        work_order = _get_by_ot(db, ot)
        _upsert_stage_date(db, work_order, data, user.id)
        db.flush()
    previous_location = work_order.location

    resolution = resolve_stage_transition(
        work_order.dates,
        previous_location,
        data.stage,
        data.confirmed,
    )
    apply_resolution(db, work_order, resolution, user.id)

    db.commit()
    db.refresh(work_order)

    logger.info(
        "update_stage_date: ot=%s stage=%s confirmed=%s location=%s->%s status=%s",
        ot, data.stage, data.confirmed, previous_location,
        work_order.location, work_order.status,
    )
    return work_order, resolution


def set_priority(
    db: Session,
    work_order_id: int,
    priority: bool,
    user: Usuario,
) -> WorkOrder:
    """Mark or unmark a work order as priority.

    Raises:
        HTTPException 404: If the work order does not exist.
    """
    work_order = get_work_order(db, work_order_id)
    _record_change(db, work_order, "priority", work_order.priority, priority, user.id)
    work_order.priority = priority
    work_order.updated_by = user.id

    db.commit()
    db.refresh(work_order)

    logger.info("set_priority: ot=%s priority=%s", work_order.ot, priority)
    return work_order
