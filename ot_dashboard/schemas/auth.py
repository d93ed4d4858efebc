"""
Pydantic v2 schemas for the authentication endpoints.

Covers the JWT token response and the public user representation
returned by ``GET /api/auth/me``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """Response body returned after a successful authentication.

    Attributes:
        access_token: Signed JWT string to be sent in the
                      ``Authorization: Bearer <token>`` header.
        token_type: Always ``"bearer"`` per OAuth2 convention.
    """

    access_token: str = Field(..., description="JWT de acceso firmado con HS256")
    token_type: str = Field(default="bearer", description="Tipo de token OAuth2")


class UserResponse(BaseModel):
    """Public representation of an authenticated user.

    ``es_admin`` is derived from ``rol`` so that clients gate administrative
    screens on the role resolved by the server.

    Attributes:
        id: Database primary key.
        email: Email address on record.
        nombre_completo: Full display name.
        rol: Role code; one of ``constants.ROLES``.
        activo: Whether the account is currently active.
        es_admin: ``True`` when ``rol == "ADMIN"``.
    """

    id: int
    email: str
    nombre_completo: str | None
    rol: str
    activo: bool
    es_admin: bool

    model_config = ConfigDict(from_attributes=True)
