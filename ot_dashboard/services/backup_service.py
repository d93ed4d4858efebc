"""
Backup and restore of the work-order tables.

``create_backup`` dumps every work order, stage date, history row, issue and
issue note into one JSON-serialisable document (see ``schemas.backup``).

``restore_backup`` replaces *all* of that data with the content of an
uploaded document.  The file is parsed and validated completely before any
row is deleted, and the delete + insert happen in a single transaction that
is rolled back on any failure.  User accounts are not part of a backup:
author references to users that no longer exist are set to ``NULL``.

On PostgreSQL the ``id`` sequences are moved past the restored ids so that
new rows do not collide with them.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ot_dashboard.models.issue import Issue, IssueNote
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.models.work_order import WorkOrder
from ot_dashboard.models.work_order_date import WorkOrderDate
from ot_dashboard.models.work_order_history import WorkOrderHistory
from ot_dashboard.schemas.backup import (
    BackupFile,
    IssueNoteRow,
    IssueRow,
    WorkOrderDateRow,
    WorkOrderHistoryRow,
    WorkOrderRow,
)
from ot_dashboard.utils.constants import BACKUP_VERSION

logger = logging.getLogger(__name__)

# Restore order (parents first); deletion runs in reverse
_TABLES: list[tuple[str, type, type]] = [
    ("work_orders", WorkOrder, WorkOrderRow),
    ("work_order_dates", WorkOrderDate, WorkOrderDateRow),
    ("work_order_history", WorkOrderHistory, WorkOrderHistoryRow),
    ("issues", Issue, IssueRow),
    ("issue_notes", IssueNote, IssueNoteRow),
]

_USER_COLUMNS = ("created_by", "updated_by", "changed_by")


def _invalid(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Archivo de backup inválido: {detail}",
    )


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------


def create_backup(db: Session) -> dict[str, Any]:
    """Return a JSON-ready snapshot of every work-order table."""
    payload: dict[str, Any] = {
        "version": BACKUP_VERSION,
        "created_at": datetime.now(timezone.utc),
    }
    for key, model, row_schema in _TABLES:
        rows = db.query(model).order_by(model.id).all()
        payload[key] = [row_schema.model_validate(row) for row in rows]

    backup = BackupFile(**payload)
    logger.info(
        "create_backup: work_orders=%d dates=%d issues=%d",
        len(backup.work_orders), len(backup.work_order_dates), len(backup.issues),
    )
    return backup.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Restore
# ---------------------------------------------------------------------------


def parse_backup(raw: bytes | str) -> BackupFile:
    """Parse and validate an uploaded backup document.

    Raises:
        HTTPException 422: Malformed JSON, schema mismatch or dangling
                           references between tables.
    """
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise _invalid("no es un JSON válido") from exc

    try:
        backup = BackupFile.model_validate(document)
    except ValidationError as exc:
        raise _invalid(f"{exc.error_count()} error(es) de formato") from exc

    work_order_ids = {row.id for row in backup.work_orders}
    if len(work_order_ids) != len(backup.work_orders):
        raise _invalid("IDs de OT duplicados")
    if len({row.ot for row in backup.work_orders}) != len(backup.work_orders):
        raise _invalid("números de OT duplicados")

    for key in ("work_order_dates", "work_order_history", "issues"):
        for row in getattr(backup, key):
            if row.work_order_id not in work_order_ids:
                raise _invalid(f"{key} referencia la OT inexistente {row.work_order_id}")

    issue_ids = {row.id for row in backup.issues}
    for note in backup.issue_notes:
        if note.issue_id not in issue_ids:
            raise _invalid(f"nota referencia el problema inexistente {note.issue_id}")

    return backup


def _reset_sequences(db: Session) -> None:
    if db.get_bind().dialect.name != "postgresql":
        return
    for _, model, _ in _TABLES:
        table = model.__tablename__
        db.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
            )
        )


def restore_backup(db: Session, raw: bytes | str) -> dict[str, int]:
    """Replace all work-order data with the content of *raw*.

    Returns:
        Row counts restored per table.

    Raises:
        HTTPException 422: If the document is invalid or violates a
                           database constraint; nothing is changed.
    """
    backup = parse_backup(raw)
    user_ids = {user_id for (user_id,) in db.query(Usuario.id).all()}

    try:
        for _, model, _ in reversed(_TABLES):
            db.query(model).delete()
        db.flush()

        counts: dict[str, int] = {}
        for key, model, _ in _TABLES:
            rows = getattr(backup, key)
            for row in rows:
                values = row.model_dump()
                for column in _USER_COLUMNS:
                    if column in values and values[column] not in user_ids:
                        values[column] = None
                db.add(model(**values))
            db.flush()
            counts[key] = len(rows)

        _reset_sequences(db)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("restore_backup: integrity error, rolled back: %s", exc.orig)
        raise _invalid("los datos violan una restricción de la base de datos") from exc
    except Exception:
        db.rollback()
        logger.exception("restore_backup: unexpected failure, rolled back")
        raise

    logger.info("restore_backup: restored %s", counts)
    return counts
