"""
User administration router.

Mounts under ``/api/usuarios`` (prefix set in ``main.py``).  Every endpoint
requires the ``ADMIN`` role.

Endpoints
---------
GET  /       — List user accounts.
POST /       — Create an account with a role.
PUT  /{id}   — Change name, password, role or active flag.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.usuario import UsuarioCreate, UsuarioResponse, UsuarioUpdate
from ot_dashboard.services import usuario_service
from ot_dashboard.services.auth_service import require_role
from ot_dashboard.utils.constants import ROL_ADMIN

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Usuarios"])


@router.get(
    "",
    response_model=list[UsuarioResponse],
    summary="Listar usuarios",
    responses={403: {"description": "Rol insuficiente (requiere ADMIN)."}},
)
def list_usuarios(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(require_role(ROL_ADMIN))],
) -> list[UsuarioResponse]:
    return [UsuarioResponse.model_validate(u) for u in usuario_service.list_usuarios(db)]


@router.post(
    "",
    response_model=UsuarioResponse,
    status_code=201,
    summary="Crear usuario",
    description="Crea una cuenta con el rol indicado (ADMIN, OPERADOR o CONSULTA).",
    responses={
        201: {"description": "Usuario creado."},
        403: {"description": "Rol insuficiente (requiere ADMIN)."},
        409: {"description": "El correo ya está registrado."},
        422: {"description": "Rol inválido o datos de entrada inválidos."},
    },
)
def create_usuario(
    data: UsuarioCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(ROL_ADMIN))],
) -> UsuarioResponse:
    logger.info("POST /usuarios email=%s rol=%s user=%s", data.email, data.rol, current_user.email)
    return UsuarioResponse.model_validate(usuario_service.create_usuario(db, data))


@router.put(
    "/{usuario_id}",
    response_model=UsuarioResponse,
    summary="Actualizar usuario",
    responses={
        200: {"description": "Usuario actualizado."},
        403: {"description": "Rol insuficiente (requiere ADMIN)."},
        404: {"description": "Usuario no encontrado."},
    },
)
def update_usuario(
    usuario_id: int,
    data: UsuarioUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(ROL_ADMIN))],
) -> UsuarioResponse:
    logger.info("PUT /usuarios/%d user=%s", usuario_id, current_user.email)
    return UsuarioResponse.model_validate(usuario_service.update_usuario(db, usuario_id, data))
