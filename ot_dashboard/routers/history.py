"""
Change-history router.

Mounts under ``/api/history`` (prefix set in ``main.py``).

Endpoints:
    GET / — Latest field changes across all work orders.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ot_dashboard.config import get_settings
from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.history import ChangeHistoryItem
from ot_dashboard.services import history_service
from ot_dashboard.services.auth_service import get_current_user

router = APIRouter(tags=["Historial"])


@router.get(
    "",
    response_model=list[ChangeHistoryItem],
    summary="Últimos cambios",
    description=(
        "Retorna los cambios más recientes sobre todas las OTs (límite "
        "``HISTORY_LIMIT``, default 50). No incluye los cambios de estado ni "
        "de avance, que se derivan de las fechas confirmadas."
    ),
    responses={
        200: {"description": "Cambios ordenados del más reciente al más antiguo."},
        401: {"description": "Token JWT ausente o inválido."},
    },
)
def get_change_history(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> list[ChangeHistoryItem]:
    return history_service.get_change_history(db, limit=get_settings().HISTORY_LIMIT)
