"""
User-account administration.

Accounts are created and edited by administrators only; the role stored on
each account is the single source of truth for what the user may do.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ot_dashboard.models.usuario import Usuario
from ot_dashboard.schemas.usuario import UsuarioCreate, UsuarioUpdate
from ot_dashboard.utils.security import hash_password

logger = logging.getLogger(__name__)


def _get_usuario(db: Session, usuario_id: int) -> Usuario:
    usuario: Usuario | None = db.query(Usuario).filter(Usuario.id == usuario_id).first()
    if usuario is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Usuario con ID {usuario_id} no encontrado.",
        )
    return usuario


def list_usuarios(db: Session) -> list[Usuario]:
    return db.query(Usuario).order_by(Usuario.email).all()


def create_usuario(db: Session, data: UsuarioCreate) -> Usuario:
    """Create a user account.

    Raises:
        HTTPException 409: If the email is already registered.
    """
    email = data.email.strip().lower()
    if db.query(Usuario).filter(Usuario.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Ya existe un usuario con el correo {email}.",
        )

    usuario = Usuario(
        email=email,
        password_hash=hash_password(data.password),
        nombre_completo=data.nombre_completo,
        rol=data.rol,
        activo=True,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)

    logger.info("create_usuario: id=%d email=%s rol=%s", usuario.id, email, usuario.rol)
    return usuario


def update_usuario(db: Session, usuario_id: int, data: UsuarioUpdate) -> Usuario:
    """Apply a partial update to a user account.

    Raises:
        HTTPException 404: If the user does not exist.
    """
    usuario = _get_usuario(db, usuario_id)

    update_data = data.model_dump(exclude_unset=True)
    password = update_data.pop("password", None)
    if password:
        usuario.password_hash = hash_password(password)
    for field, value in update_data.items():
        if value is not None:
            setattr(usuario, field, value)

    db.commit()
    db.refresh(usuario)

    logger.info(
        "update_usuario: id=%d fields=%s",
        usuario_id, sorted(update_data.keys()) + (["password"] if password else []),
    )
    return usuario
