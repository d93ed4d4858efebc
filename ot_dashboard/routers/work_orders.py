"""
Work orders (OT) router.

Mounts under ``/api/work-orders`` (prefix set in ``main.py``).

All endpoints require a valid JWT token (``get_current_user`` dependency).
Creating an order requires ``ADMIN``; editing dates and priority requires
``ADMIN`` or ``OPERADOR``.  Every successful write announces a change event
to the realtime subscribers once the response has been produced.

Endpoints
---------
GET  /                 — Board: orders grouped by INCO / ANTI / ARCHIVED.
GET  /stages           — Configured stage sequences of both lines.
GET  /{id}             — One order with its stage dates and total delay.
POST /                 — Create a new order in INCO (ADMIN).
PUT  /{ot}/dates       — Schedule / confirm a stage date (ADMIN | OPERADOR).
PUT  /{id}/priority    — Mark or unmark as priority (ADMIN | OPERADOR).
GET  /{id}/history     — Merged change / issue / note history.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.history import HistoryEntry
from ot_dashboard.schemas.work_order import (
    PriorityUpdate,
    StageDateUpdate,
    StagesResponse,
    WorkOrderBoard,
    WorkOrderCreate,
    WorkOrderResponse,
)
from ot_dashboard.services import history_service, work_order_service
from ot_dashboard.services.auth_service import get_current_user, require_role
from ot_dashboard.services.realtime import build_event, notifier
from ot_dashboard.utils.constants import ROL_ADMIN, ROLES_EDICION

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Órdenes de Trabajo"])


# ---------------------------------------------------------------------------
# GET /
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=WorkOrderBoard,
    summary="Tablero de OTs",
    description=(
        "Retorna todas las OTs agrupadas por ubicación (INCO, ANTI, ARCHIVED). "
        "Cada lista viene ordenada con las prioritarias primero y luego por "
        "avance descendente."
    ),
    responses={
        200: {"description": "Tablero completo."},
        401: {"description": "Token JWT ausente o inválido."},
    },
)
def get_board(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> WorkOrderBoard:
    return work_order_service.get_board(db)


# ---------------------------------------------------------------------------
# GET /stages
# ---------------------------------------------------------------------------


@router.get(
    "/stages",
    response_model=StagesResponse,
    summary="Etapas configuradas",
    description="Secuencias ordenadas de etapas de INCO y ANTI con su avance (%).",
)
def get_stages(
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> StagesResponse:
    return work_order_service.get_stages()


# ---------------------------------------------------------------------------
# GET /{id}
# ---------------------------------------------------------------------------


@router.get(
    "/{work_order_id}",
    response_model=WorkOrderResponse,
    summary="Detalle de una OT",
    responses={
        200: {"description": "OT encontrada."},
        401: {"description": "Token JWT ausente o inválido."},
        404: {"description": "OT no encontrada."},
    },
)
def get_work_order(
    work_order_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> WorkOrderResponse:
    return work_order_service.get_detalle(db, work_order_id)


# ---------------------------------------------------------------------------
# POST /
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=WorkOrderResponse,
    status_code=201,
    summary="Crear OT",
    description=(
        "Registra una nueva OT en la línea INCO, con estado 'Sin iniciar' y "
        "avance 0. El número de OT debe ser único. Requiere rol ADMIN."
    ),
    responses={
        201: {"description": "OT creada exitosamente."},
        401: {"description": "Token JWT ausente o inválido."},
        403: {"description": "Rol insuficiente (requiere ADMIN)."},
        409: {"description": "Ya existe una OT con ese número."},
        422: {"description": "Número de OT vacío o con '/'."},
    },
)
def create_work_order(
    data: WorkOrderCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(ROL_ADMIN))],
) -> WorkOrderResponse:
    """Create a new work order and announce it to realtime subscribers.

    Raises:
        HTTPException 409: If ``data.ot`` is already in use.
    """
    logger.info("POST /work-orders ot=%s user=%s", data.ot, current_user.email)
    work_order = work_order_service.create_work_order(db, data, current_user)
    background_tasks.add_task(
        notifier.broadcast, build_event("INSERT", work_order.id, work_order.ot)
    )
    return work_order_service.build_response(work_order)


# ---------------------------------------------------------------------------
# PUT /{ot}/dates
# ---------------------------------------------------------------------------


@router.put(
    "/{ot}/dates",
    response_model=WorkOrderResponse,
    summary="Programar o confirmar fecha de etapa",
    description=(
        "Crea o actualiza la fecha de una etapa de la OT. Tras guardar, el "
        "estado, el avance y la ubicación se recalculan a partir de la última "
        "etapa confirmada: confirmar 'Anticorr' mueve la OT a ANTI y confirmar "
        "'Despacho' la archiva. Las OTs archivadas conservan su estado. "
        "Requiere rol ADMIN u OPERADOR."
    ),
    responses={
        200: {"description": "Fecha guardada; se retorna la OT actualizada."},
        401: {"description": "Token JWT ausente o inválido."},
        403: {"description": "Rol insuficiente (requiere ADMIN u OPERADOR)."},
        404: {"description": "OT no encontrada."},
        422: {"description": "Etapa desconocida o datos inválidos."},
    },
)
def update_stage_date(
    ot: str,
    data: StageDateUpdate,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_EDICION))],
) -> WorkOrderResponse:
    logger.info(
        "PUT /work-orders/%s/dates stage=%s confirmed=%s user=%s",
        ot, data.stage, data.confirmed, current_user.email,
    )
    work_order, _ = work_order_service.update_stage_date(db, ot, data, current_user)
    background_tasks.add_task(
        notifier.broadcast, build_event("UPDATE", work_order.id, work_order.ot)
    )
    return work_order_service.build_response(work_order)


# ---------------------------------------------------------------------------
# PUT /{id}/priority
# ---------------------------------------------------------------------------


@router.put(
    "/{work_order_id}/priority",
    response_model=WorkOrderResponse,
    summary="Marcar OT como prioritaria",
    description="Marca o desmarca la OT como prioritaria. Requiere rol ADMIN u OPERADOR.",
    responses={
        200: {"description": "Prioridad actualizada."},
        403: {"description": "Rol insuficiente (requiere ADMIN u OPERADOR)."},
        404: {"description": "OT no encontrada."},
    },
)
def set_priority(
    work_order_id: int,
    data: PriorityUpdate,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_EDICION))],
) -> WorkOrderResponse:
    logger.info(
        "PUT /work-orders/%d/priority priority=%s user=%s",
        work_order_id, data.priority, current_user.email,
    )
    work_order = work_order_service.set_priority(db, work_order_id, data.priority, current_user)
    background_tasks.add_task(
        notifier.broadcast, build_event("UPDATE", work_order.id, work_order.ot)
    )
    return work_order_service.build_response(work_order)


# ---------------------------------------------------------------------------
# GET /{id}/history
# ---------------------------------------------------------------------------


@router.get(
    "/{work_order_id}/history",
    response_model=list[HistoryEntry],
    summary="Historial de una OT",
    description=(
        "Cambios de fechas y estado, problemas registrados y notas de la OT, "
        "ordenados del más reciente al más antiguo."
    ),
    responses={
        200: {"description": "Historial de la OT."},
        404: {"description": "OT no encontrada."},
    },
)
def get_history(
    work_order_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> list[HistoryEntry]:
    return history_service.get_work_order_history(db, work_order_id)
