"""
Application-wide constants for the Tablero de OTs.

Defines the two refurbishment pipelines (INCO and ANTI) with their ordered
stage sequences, the work-order locations, user roles, and issue
enumerations used across routers, services, and models.
"""

from typing import Final, NamedTuple


class Stage(NamedTuple):
    """A named checkpoint in a pipeline and the progress it represents."""

    name: str
    progress: int


# ---------------------------------------------------------------------------
# User roles
# ---------------------------------------------------------------------------

ROL_ADMIN: Final[str] = "ADMIN"
ROL_OPERADOR: Final[str] = "OPERADOR"
ROL_CONSULTA: Final[str] = "CONSULTA"

ROLES: Final[list[str]] = [
    ROL_ADMIN,
    ROL_OPERADOR,
    ROL_CONSULTA,
]

# Roles allowed to confirm dates, toggle priority and raise issues
ROLES_EDICION: Final[tuple[str, ...]] = (ROL_ADMIN, ROL_OPERADOR)

# ---------------------------------------------------------------------------
# Work-order locations (one-directional: INCO -> ANTI -> ARCHIVED)
# ---------------------------------------------------------------------------

LOCATION_INCO: Final[str] = "INCO"
LOCATION_ANTI: Final[str] = "ANTI"
LOCATION_ARCHIVED: Final[str] = "ARCHIVED"

LOCATIONS: Final[list[str]] = [
    LOCATION_INCO,
    LOCATION_ANTI,
    LOCATION_ARCHIVED,
]

# ---------------------------------------------------------------------------
# Stage sequences
# ---------------------------------------------------------------------------

INCO_STAGES: Final[tuple[Stage, ...]] = (
    Stage("Recepción", 5),
    Stage("Desarme", 15),
    Stage("Inspección", 25),
    Stage("Reparación", 50),
    Stage("Armado", 70),
    Stage("Pruebas", 85),
    Stage("Anticorr", 100),
)

ANTI_STAGES: Final[tuple[Stage, ...]] = (
    Stage("Arenado", 20),
    Stage("Anticorrosivo", 40),
    Stage("Pintura", 60),
    Stage("Curado", 75),
    Stage("Control Calidad", 90),
    Stage("Despacho", 100),
)

# Confirming this stage hands an INCO order over to the ANTI line
STAGE_ANTICORR: Final[str] = "Anticorr"
# Confirming this stage on an ANTI order archives it
STAGE_DESPACHO: Final[str] = "Despacho"

STATUS_SIN_INICIAR: Final[str] = "Sin iniciar"

# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

PRIORIDADES_ISSUE: Final[list[str]] = [
    "LOW",
    "MEDIUM",
    "HIGH",
    "CRITICAL",
]

ISSUE_OPEN: Final[str] = "OPEN"
ISSUE_RESOLVED: Final[str] = "RESOLVED"

ESTADOS_ISSUE: Final[list[str]] = [
    ISSUE_OPEN,
    ISSUE_RESOLVED,
]

# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

# Derived fields hidden from the global change feed
CAMPOS_DERIVADOS: Final[frozenset[str]] = frozenset({"status", "progress"})

BACKUP_VERSION: Final[int] = 1
