"""
Authentication router for the Tablero de OTs API.

Mounts under ``/api/auth`` (prefix set in ``main.py``).

Endpoints:
    POST /login   — Authenticate with email + password, receive JWT.
    POST /refresh — Exchange a valid token for a new one (extend session).
    GET  /me      — Return the currently authenticated user's profile.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.auth import TokenResponse, UserResponse
from ot_dashboard.services.auth_service import authenticate_user, get_current_user
from ot_dashboard.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _issue_token(user: Usuario) -> str:
    return create_access_token(
        data={
            "sub": str(user.id),
            "email": user.email,
            "rol": user.rol,
        }
    )


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Iniciar sesión",
    description=(
        "Autentica al usuario con su correo y contraseña (formulario OAuth2, "
        "el correo va en el campo ``username``) y retorna un JWT de acceso "
        "válido por ``JWT_EXPIRATION_MINUTES`` (default 8 h)."
    ),
    responses={
        200: {"description": "Autenticación exitosa; se incluye el token JWT."},
        401: {"description": "Credenciales incorrectas o cuenta inactiva."},
        422: {"description": "Cuerpo de la solicitud inválido."},
    },
)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Authenticate a user and issue a JWT access token.

    Uses the standard OAuth2 ``application/x-www-form-urlencoded`` form so the
    Swagger UI "Authorize" button works; the email travels as ``username``.

    Raises:
        HTTPException 401: If credentials are invalid or the account is inactive.
    """
    user = authenticate_user(db, form_data.username, form_data.password)

    if user is None:
        logger.warning("Failed login attempt for email='%s'", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales incorrectas o cuenta inactiva",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Successful login for email='%s' rol='%s'", user.email, user.rol)
    return TokenResponse(access_token=_issue_token(user))


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Renovar token",
    description=(
        "Emite un nuevo JWT a partir de un token válido (no expirado). "
        "Permite extender la sesión sin re-autenticación."
    ),
    responses={
        200: {"description": "Token renovado exitosamente."},
        401: {"description": "Token inválido o expirado."},
    },
)
def refresh_token(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> TokenResponse:
    logger.info("Token refreshed for email='%s'", current_user.email)
    return TokenResponse(access_token=_issue_token(current_user))


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Perfil del usuario autenticado",
    description=(
        "Retorna el perfil del usuario identificado por el JWT, incluido su "
        "rol y si tiene privilegios de administrador (``es_admin``)."
    ),
    responses={
        200: {"description": "Perfil del usuario autenticado."},
        401: {"description": "Token ausente, inválido o expirado."},
    },
)
def get_me(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)
