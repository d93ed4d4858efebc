"""
Authentication business logic for the Tablero de OTs.

Provides:
- ``authenticate_user`` — credential verification against the DB.
- ``resolve_user_from_token`` — JWT → active ``Usuario`` lookup shared by
  the HTTP dependency and the realtime socket.
- ``get_current_user`` — FastAPI dependency reading the Bearer JWT.
- ``require_role`` — dependency factory enforcing role-based access on top
  of ``get_current_user``.  Administrative screens are gated by the
  ``ADMIN`` role, never by a particular identity.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ot_dashboard.database import get_db
from ot_dashboard.models.usuario import Usuario
from ot_dashboard.utils.security import verify_password, verify_token

logger = logging.getLogger(__name__)

# ``tokenUrl`` must match the login endpoint path (relative to root).
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# ---------------------------------------------------------------------------
# Core authentication function
# ---------------------------------------------------------------------------


def authenticate_user(db: Session, email: str, password: str) -> Usuario | None:
    """Verify email/password credentials against the database.

    Returns ``None`` (instead of raising) so that callers control the HTTP
    error response.

    Args:
        db: An active SQLAlchemy session.
        email: The login email submitted by the client (case-insensitive).
        password: The plain-text password submitted by the client.

    Returns:
        The ``Usuario`` on success, or ``None`` for an unknown user, an
        inactive account or a wrong password.
    """
    user: Usuario | None = (
        db.query(Usuario)
        .filter(Usuario.email == email.strip().lower(), Usuario.activo.is_(True))
        .first()
    )

    if user is None:
        logger.debug("authenticate_user: unknown or inactive user '%s'", email)
        return None

    if not verify_password(password, user.password_hash):
        logger.debug("authenticate_user: wrong password for user '%s'", email)
        return None

    # Last-access timestamp is best-effort
    try:
        user.ultimo_acceso = datetime.now(timezone.utc)
        db.commit()
    except SQLAlchemyError:  # pragma: no cover
        db.rollback()
        logger.warning("Could not update ultimo_acceso for user '%s'", email)

    return user


def resolve_user_from_token(db: Session, token: str) -> Usuario | None:
    """Return the active user referenced by *token*, or ``None``."""
    try:
        payload = verify_token(token)
    except ValueError:
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    return (
        db.query(Usuario)
        .filter(Usuario.id == user_id, Usuario.activo.is_(True))
        .first()
    )


# ---------------------------------------------------------------------------
# FastAPI dependency — current authenticated user
# ---------------------------------------------------------------------------


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> Usuario:
    """FastAPI dependency that resolves the caller's identity from a JWT.

    Raises:
        HTTPException 401: If the token is missing, invalid, or expired,
                           or if the referenced user no longer exists or
                           has been deactivated.
    """
    user = resolve_user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No se pudo validar las credenciales",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# ---------------------------------------------------------------------------
# Role enforcement dependency factory
# ---------------------------------------------------------------------------


def require_role(*roles: str):
    """Return a FastAPI dependency that restricts access to the given roles.

    .. code-block:: python

        @router.post("/")
        def create_work_order(
            current_user: Usuario = Depends(require_role("ADMIN")),
        ):
            ...

    Raises:
        HTTPException 403: If the authenticated user's role is not in
                           the allowed *roles* set.
    """
    allowed = frozenset(roles)

    def _check_role(
        current_user: Annotated[Usuario, Depends(get_current_user)],
    ) -> Usuario:
        if current_user.rol not in allowed:
            logger.warning(
                "require_role: user=%s rol=%s denied (allowed=%s)",
                current_user.email, current_user.rol, sorted(allowed),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"Acceso denegado. Se requiere uno de los roles: "
                    f"{sorted(allowed)}"
                ),
            )
        return current_user

    return _check_role
