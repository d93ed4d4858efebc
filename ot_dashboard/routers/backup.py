"""
Backup / restore router.

Mounts under ``/api/backup`` (prefix set in ``main.py``).  Both endpoints
require the ``ADMIN`` role.

Endpoints
---------
GET  /         — Download a JSON snapshot of all work-order data.
POST /restore  — Replace all work-order data with an uploaded snapshot.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.common import MessageResponse
from ot_dashboard.services import backup_service
from ot_dashboard.services.auth_service import require_role
from ot_dashboard.services.realtime import build_event, notifier
from ot_dashboard.utils.constants import ROL_ADMIN

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Respaldo"])


# ---------------------------------------------------------------------------
# GET /
# ---------------------------------------------------------------------------


@router.get(
    "",
    summary="Descargar respaldo",
    description=(
        "Genera un archivo JSON (``backup_YYYY-MM-DD.json``) con todas las OTs, "
        "fechas de etapa, historial, problemas y notas. No incluye usuarios. "
        "Requiere rol ADMIN."
    ),
    responses={
        200: {"description": "Archivo de respaldo."},
        403: {"description": "Rol insuficiente (requiere ADMIN)."},
    },
)
def download_backup(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(ROL_ADMIN))],
) -> JSONResponse:
    logger.info("GET /backup user=%s", current_user.email)
    filename = f"backup_{date.today().isoformat()}.json"
    return JSONResponse(
        content=backup_service.create_backup(db),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------------------------------------------------------------------
# POST /restore
# ---------------------------------------------------------------------------


@router.post(
    "/restore",
    response_model=MessageResponse,
    summary="Restaurar respaldo",
    description=(
        "Reemplaza todos los datos de OTs por el contenido del archivo subido. "
        "El archivo se valida completo antes de borrar nada y la restauración "
        "ocurre en una sola transacción. Requiere rol ADMIN."
    ),
    responses={
        200: {"description": "Respaldo restaurado."},
        403: {"description": "Rol insuficiente (requiere ADMIN)."},
        422: {"description": "Archivo de backup inválido."},
    },
)
async def restore_backup(
    background_tasks: BackgroundTasks,
    file: Annotated[UploadFile, File(description="Archivo JSON generado por GET /backup")],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(ROL_ADMIN))],
) -> MessageResponse:
    content = await file.read()
    logger.info(
        "POST /backup/restore file=%s size=%d user=%s",
        file.filename, len(content), current_user.email,
    )
    counts = backup_service.restore_backup(db, content)
    background_tasks.add_task(notifier.broadcast, build_event("RESTORE", None))
    return MessageResponse(
        message="Respaldo restaurado correctamente.",
        detail=", ".join(f"{table}={count}" for table, count in counts.items()),
    )
