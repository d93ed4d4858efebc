"""
Pydantic v2 schemas for the issues (problemas) endpoints.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ot_dashboard.utils.constants import ESTADOS_ISSUE, PRIORIDADES_ISSUE


def _check_priority(value: str | None) -> str | None:
    if value is not None and value not in PRIORIDADES_ISSUE:
        raise ValueError(f"Prioridad inválida '{value}'. Valores: {PRIORIDADES_ISSUE}")
    return value


def _check_delay(start: datetime.date | None, end: datetime.date | None) -> None:
    if start is not None and end is not None and end < start:
        raise ValueError("La fecha de término del retraso es anterior a la de inicio")


class IssueCreate(BaseModel):
    """Payload for raising a new issue (POST /api/issues).

    Attributes:
        work_order_id: Primary key of the affected work order.
        stage: Stage where the issue was detected.
        title: Short summary.
        description: Detailed description.
        priority: ``LOW``, ``MEDIUM``, ``HIGH`` or ``CRITICAL``.
        delay_start_date: First day of the delay caused by the issue.
        delay_end_date: Last day of the delay; omit while it is ongoing.
    """

    work_order_id: int = Field(..., ge=1)
    stage: str | None = Field(default=None, max_length=100)
    title: str = Field(..., min_length=3, max_length=200)
    description: str | None = None
    priority: str = Field(default="MEDIUM")
    delay_start_date: datetime.date | None = None
    delay_end_date: datetime.date | None = None

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, value: str) -> str:
        return _check_priority(value)

    @model_validator(mode="after")
    def validate_delay(self) -> "IssueCreate":
        _check_delay(self.delay_start_date, self.delay_end_date)
        return self


class IssueUpdate(BaseModel):
    """Partial update of an issue (PUT /api/issues/{id})."""

    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = None
    priority: str | None = None
    status: str | None = None
    delay_start_date: datetime.date | None = None
    delay_end_date: datetime.date | None = None

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, value: str | None) -> str | None:
        return _check_priority(value)

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str | None) -> str | None:
        if value is not None and value not in ESTADOS_ISSUE:
            raise ValueError(f"Estado inválido '{value}'. Valores: {ESTADOS_ISSUE}")
        return value

    @model_validator(mode="after")
    def validate_delay(self) -> "IssueUpdate":
        _check_delay(self.delay_start_date, self.delay_end_date)
        return self


class IssueNoteCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class IssueNoteResponse(BaseModel):
    id: int
    issue_id: int
    content: str
    created_at: datetime.datetime
    user_email: str | None = None


class IssueResponse(BaseModel):
    """Full issue with its notes and the delay it accounts for.

    Attributes:
        delay_days: Days of delay (inclusive window); 0 without a window.
    """

    id: int
    work_order_id: int
    stage: str | None = None
    title: str
    description: str | None = None
    priority: str
    status: str
    delay_start_date: datetime.date | None = None
    delay_end_date: datetime.date | None = None
    delay_days: int = 0
    created_at: datetime.datetime
    updated_at: datetime.datetime
    notes: list[IssueNoteResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
