"""
Pydantic v2 schemas for user management (CRUD) endpoints.

Separates write schemas (``UsuarioCreate``, ``UsuarioUpdate``) from the
read schema (``UsuarioResponse``) to avoid accidental password exposure in
API responses.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ot_dashboard.utils.constants import ROLES

# Re-export the canonical read schema so callers can import from one place.
from ot_dashboard.schemas.auth import UserResponse as UsuarioResponse  # noqa: F401


def _check_rol(value: str | None) -> str | None:
    if value is not None and value not in ROLES:
        raise ValueError(f"Rol inválido '{value}'. Valores permitidos: {ROLES}")
    return value


class UsuarioCreate(BaseModel):
    """Payload for creating a new user account (``POST /api/usuarios``).

    Only accessible by users with the ``ADMIN`` role.

    Attributes:
        email: Valid email address; must be unique in the database.
        password: Plain-text password that will be hashed before storage.
        nombre_completo: Full display name for UI and audit logs.
        rol: Role code from ``constants.ROLES``.
    """

    email: EmailStr = Field(..., description="Correo electrónico válido")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Contraseña en texto plano; se almacenará hasheada con bcrypt",
    )
    nombre_completo: str = Field(
        ...,
        min_length=3,
        max_length=150,
        description="Nombre completo para identificación en la UI y auditoría",
    )
    rol: str = Field(
        default="CONSULTA",
        description=f"Código de rol. Valores permitidos: {ROLES}",
    )

    @field_validator("rol")
    @classmethod
    def validate_rol(cls, value: str | None) -> str | None:
        return _check_rol(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "j.soto@taller.cl",
                "password": "Taller2026!",
                "nombre_completo": "Javiera Soto",
                "rol": "OPERADOR",
            }
        }
    )


class UsuarioUpdate(BaseModel):
    """Payload for partial updates to an existing user (``PUT /api/usuarios/{id}``).

    All fields are optional — only supplied fields are modified.
    Omitting ``password`` leaves the stored hash unchanged.
    """

    password: str | None = Field(
        default=None,
        min_length=8,
        max_length=128,
        description="Nueva contraseña en texto plano; omitir para mantener la actual",
    )
    nombre_completo: str | None = Field(
        default=None,
        min_length=3,
        max_length=150,
        description="Nombre completo actualizado",
    )
    rol: str | None = Field(
        default=None,
        description=f"Nuevo rol. Valores permitidos: {ROLES}",
    )
    activo: bool | None = Field(
        default=None,
        description="False para suspender la cuenta",
    )

    @field_validator("rol")
    @classmethod
    def validate_rol(cls, value: str | None) -> str | None:
        return _check_rol(value)
