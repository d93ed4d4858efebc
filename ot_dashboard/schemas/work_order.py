"""
Pydantic v2 schemas for the work-order (OT) endpoints.

Domain context
--------------
Every OT starts in the INCO line with no dates.  Users schedule and confirm
stage dates; each write re-derives ``status``/``progress``/``location``
through the stage resolver.  Once an order is dispatched from the ANTI line
it is ARCHIVED and its derived fields are frozen.

The ``dates`` map of ``WorkOrderResponse`` is keyed by stage name and only
lists stages that have a date.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Stage configuration
# ---------------------------------------------------------------------------


class StageSchema(BaseModel):
    """A configured stage and the progress reached when it is confirmed."""

    name: str = Field(..., description="Nombre de la etapa.")
    progress: int = Field(..., ge=0, le=100, description="Avance (%) al confirmarla.")


class StagesResponse(BaseModel):
    """Ordered stage sequences of both pipelines."""

    inco: list[StageSchema]
    anti: list[StageSchema]


# ---------------------------------------------------------------------------
# Input schemas — write operations
# ---------------------------------------------------------------------------


class WorkOrderCreate(BaseModel):
    """Payload for creating a new work order (POST /).

    Attributes:
        ot: Human-facing order number, unique across all locations.
        client: Client name.
        description: Free-text description of the job.
        tag: Equipment tag.
    """

    ot: str = Field(..., min_length=1, max_length=50, description="Número de OT.")
    client: str = Field(..., min_length=1, max_length=200, description="Cliente.")
    description: str | None = Field(default=None, description="Descripción del trabajo.")
    tag: str | None = Field(default=None, max_length=100, description="TAG del equipo.")

    @field_validator("ot")
    @classmethod
    def validate_ot(cls, value: str) -> str:
        """Strip the order number; it must be non-blank and usable as a path segment."""
        value = value.strip()
        if not value:
            raise ValueError("El número de OT no puede estar vacío.")
        if "/" in value:
            raise ValueError("El número de OT no puede contener '/'.")
        return value

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ot": "24-0153",
                "client": "Minera Los Andes",
                "description": "Bomba centrífuga 6x4, overhaul completo",
                "tag": "P-2041",
            }
        }
    )


class StageDateUpdate(BaseModel):
    """Payload for scheduling or confirming a stage date (PUT /{ot}/dates).

    Attributes:
        stage: Stage name from the order's sequence.
        date: Planned or actual date; ``None`` clears the schedule.
        confirmed: ``True`` when the stage has actually been reached.
    """

    stage: str = Field(..., min_length=1, max_length=100, description="Nombre de la etapa.")
    date: datetime.date | None = Field(default=None, description="Fecha programada o real.")
    confirmed: bool = Field(default=False, description="Si la etapa ya se cumplió.")


class PriorityUpdate(BaseModel):
    """Payload for PUT /{id}/priority."""

    priority: bool = Field(..., description="Marcar (true) o desmarcar la OT como prioritaria.")


# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------


class StageDateInfo(BaseModel):
    """Date and confirmation flag of one stage."""

    date: datetime.date
    confirmed: bool = False


class WorkOrderResponse(BaseModel):
    """Full representation of a work order as shown on the board.

    Attributes:
        retraso_total: Total delay in days accumulated by the order's issues.
    """

    id: int
    ot: str
    client: str
    description: str | None = None
    tag: str | None = None
    location: str
    status: str
    progress: int
    priority: bool
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None
    dates: dict[str, StageDateInfo] = Field(default_factory=dict)
    retraso_total: int = Field(default=0, description="Días de retraso por problemas.")


class WorkOrderBoard(BaseModel):
    """Work orders grouped by location.

    Each list is sorted with priority orders first, then by descending
    progress.
    """

    inco: list[WorkOrderResponse] = Field(default_factory=list)
    anti: list[WorkOrderResponse] = Field(default_factory=list)
    archived: list[WorkOrderResponse] = Field(default_factory=list)
