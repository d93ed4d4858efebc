"""Usuario model — application user with role-based access control."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from ot_dashboard.database import Base
from ot_dashboard.utils.constants import ROL_ADMIN


class Usuario(Base):
    """System user whose ``rol`` decides what the dashboard lets them do.

    Roles:
        - ADMIN: Creates work orders, manages users, backups and restores.
        - OPERADOR: Confirms stage dates, toggles priority, raises issues.
        - CONSULTA: Read-only access to the board, history and summary.

    Attributes:
        id: Primary key.
        email: Unique email address, also the login identifier.
        password_hash: Bcrypt-hashed password (never store plain text).
        nombre_completo: Full display name.
        rol: Role identifier controlling permissions.
        activo: Whether the account is active.
        ultimo_acceso: Timestamp of the last successful login.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "usuario"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(200), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    nombre_completo = Column(String(300), nullable=True)
    rol = Column(String(50), nullable=False, default="CONSULTA")
    # "ADMIN", "OPERADOR", "CONSULTA"
    activo = Column(Boolean, default=True, nullable=False)
    ultimo_acceso = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def es_admin(self) -> bool:
        return self.rol == ROL_ADMIN
