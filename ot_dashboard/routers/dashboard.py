"""
Dashboard router.

Mounts under ``/api/dashboard`` (prefix set in ``main.py``).

Endpoints:
    GET /resumen — Summary cards: totals, average cycle time, priority
                   orders, open issues and confirmed stages per line.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.dashboard import DashboardResumen
from ot_dashboard.services import dashboard_service
from ot_dashboard.services.auth_service import get_current_user

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/resumen",
    response_model=DashboardResumen,
    summary="Resumen del tablero",
    description=(
        "Totales de OTs (en proceso y completadas), tiempo promedio en días "
        "entre la primera y la última etapa de cada línea, hasta tres OTs "
        "prioritarias con su etapa actual, problemas abiertos por prioridad "
        "y cantidad de OTs con cada etapa confirmada."
    ),
    responses={
        200: {"description": "Resumen calculado."},
        401: {"description": "Token JWT ausente o inválido."},
    },
)
def get_resumen(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> DashboardResumen:
    return dashboard_service.get_resumen(db)
