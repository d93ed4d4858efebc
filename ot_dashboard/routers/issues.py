"""
Issues (problemas) router.

Mounts under ``/api/issues`` (prefix set in ``main.py``).

Endpoints
---------
GET  /              — List issues, optionally for one work order.
POST /              — Raise an issue against a work order (ADMIN | OPERADOR).
PUT  /{id}          — Update status, priority or delay window (ADMIN | OPERADOR).
POST /{id}/notes    — Add a follow-up note (ADMIN | OPERADOR).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.issue import (
    IssueCreate,
    IssueNoteCreate,
    IssueNoteResponse,
    IssueResponse,
    IssueUpdate,
)
from ot_dashboard.services import issue_service
from ot_dashboard.services.auth_service import get_current_user, require_role
from ot_dashboard.services.realtime import build_event, notifier
from ot_dashboard.utils.constants import ROLES_EDICION

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Problemas"])


# ---------------------------------------------------------------------------
# GET /
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=list[IssueResponse],
    summary="Listar problemas",
    description="Problemas registrados, del más reciente al más antiguo, con sus notas.",
)
def list_issues(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
    work_order_id: Annotated[
        int | None,
        Query(description="ID de la OT. Omitir para todas.", ge=1),
    ] = None,
    estado: Annotated[
        str | None,
        Query(description="Filtrar por estado: OPEN o RESOLVED."),
    ] = None,
) -> list[IssueResponse]:
    return issue_service.list_issues(db, work_order_id=work_order_id, estado=estado)


# ---------------------------------------------------------------------------
# POST /
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=IssueResponse,
    status_code=201,
    summary="Registrar problema",
    description=(
        "Registra un problema sobre una OT, opcionalmente con la ventana de "
        "retraso que provoca. Requiere rol ADMIN u OPERADOR."
    ),
    responses={
        201: {"description": "Problema registrado."},
        403: {"description": "Rol insuficiente (requiere ADMIN u OPERADOR)."},
        404: {"description": "OT no encontrada."},
        422: {"description": "Prioridad inválida o ventana de retraso invertida."},
    },
)
def create_issue(
    data: IssueCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_EDICION))],
) -> IssueResponse:
    logger.info(
        "POST /issues work_order_id=%d priority=%s user=%s",
        data.work_order_id, data.priority, current_user.email,
    )
    issue = issue_service.create_issue(db, data, current_user)
    background_tasks.add_task(
        notifier.broadcast, build_event("UPDATE", issue.work_order_id)
    )
    return issue_service.get_issue(db, issue.id)


# ---------------------------------------------------------------------------
# PUT /{id}
# ---------------------------------------------------------------------------


@router.put(
    "/{issue_id}",
    response_model=IssueResponse,
    summary="Actualizar problema",
    description=(
        "Actualiza parcialmente un problema: estado, prioridad o ventana de "
        "retraso. Solo se modifican los campos enviados. Requiere rol ADMIN u OPERADOR."
    ),
    responses={
        200: {"description": "Problema actualizado."},
        403: {"description": "Rol insuficiente (requiere ADMIN u OPERADOR)."},
        404: {"description": "Problema no encontrado."},
        422: {"description": "Valores inválidos."},
    },
)
def update_issue(
    issue_id: int,
    data: IssueUpdate,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_EDICION))],
) -> IssueResponse:
    logger.info("PUT /issues/%d user=%s", issue_id, current_user.email)
    issue = issue_service.update_issue(db, issue_id, data)
    background_tasks.add_task(
        notifier.broadcast, build_event("UPDATE", issue.work_order_id)
    )
    return issue_service.get_issue(db, issue.id)


# ---------------------------------------------------------------------------
# POST /{id}/notes
# ---------------------------------------------------------------------------


@router.post(
    "/{issue_id}/notes",
    response_model=IssueNoteResponse,
    status_code=201,
    summary="Agregar nota a un problema",
    responses={
        201: {"description": "Nota agregada."},
        403: {"description": "Rol insuficiente (requiere ADMIN u OPERADOR)."},
        404: {"description": "Problema no encontrado."},
    },
)
def add_note(
    issue_id: int,
    data: IssueNoteCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_EDICION))],
) -> IssueNoteResponse:
    logger.info("POST /issues/%d/notes user=%s", issue_id, current_user.email)
    note = issue_service.add_note(db, issue_id, data, current_user)
    background_tasks.add_task(
        notifier.broadcast, build_event("UPDATE", note.issue.work_order_id)
    )
    return issue_service.build_note_response(note)
