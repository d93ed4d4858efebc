"""
Pydantic v2 schemas describing the backup file format.

A backup is a single JSON object holding every row of the work-order
tables.  The row schemas are built ``from_attributes`` so the service can
dump ORM rows directly, and reused on restore to validate an uploaded file
before any data is touched.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ot_dashboard.utils.constants import BACKUP_VERSION, LOCATIONS


class _Row(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class WorkOrderRow(_Row):
    id: int
    ot: str
    client: str
    description: str | None = None
    tag: str | None = None
    location: str
    status: str
    progress: int
    priority: bool = False
    created_by: int | None = None
    updated_by: int | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @field_validator("location")
    @classmethod
    def validate_location(cls, value: str) -> str:
        if value not in LOCATIONS:
            raise ValueError(f"Ubicación inválida '{value}'")
        return value


class WorkOrderDateRow(_Row):
    id: int
    work_order_id: int
    stage: str
    date: datetime.date | None = None
    confirmed: bool = False
    created_by: int | None = None
    updated_by: int | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class WorkOrderHistoryRow(_Row):
    id: int
    work_order_id: int
    field: str
    old_value: str | None = None
    new_value: str | None = None
    changed_by: int | None = None
    changed_at: datetime.datetime


class IssueRow(_Row):
    id: int
    work_order_id: int
    stage: str | None = None
    title: str
    description: str | None = None
    priority: str
    status: str
    delay_start_date: datetime.date | None = None
    delay_end_date: datetime.date | None = None
    created_by: int | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class IssueNoteRow(_Row):
    id: int
    issue_id: int
    content: str
    created_by: int | None = None
    created_at: datetime.datetime


class BackupFile(BaseModel):
    """Top-level backup document."""

    version: int = Field(default=BACKUP_VERSION)
    created_at: datetime.datetime
    work_orders: list[WorkOrderRow] = Field(default_factory=list)
    work_order_dates: list[WorkOrderDateRow] = Field(default_factory=list)
    work_order_history: list[WorkOrderHistoryRow] = Field(default_factory=list)
    issues: list[IssueRow] = Field(default_factory=list)
    issue_notes: list[IssueNoteRow] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def validate_version(cls, value: int) -> int:
        if value != BACKUP_VERSION:
            raise ValueError(f"Versión de backup no soportada: {value}")
        return value
