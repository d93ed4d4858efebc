"""
Pydantic v2 schemas for work-order history feeds.
"""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HistoryEntry(BaseModel):
    """One line of the merged per-order history.

    ``type`` is ``"date"`` for stage-date and other field changes,
    ``"status"`` for status changes, ``"issue"`` for a raised issue and
    ``"note"`` for an issue note.
    """

    type: Literal["date", "issue", "note", "status"]
    timestamp: datetime.datetime
    description: str
    old_value: str | None = None
    new_value: str | None = None
    user_email: str | None = None


class ChangeHistoryItem(BaseModel):
    """One entry of the global change feed (``GET /api/history``)."""

    id: int
    work_order_id: int
    ot: str = Field(default="", description="Número de OT afectada.")
    field: str
    old_value: str | None = None
    new_value: str | None = None
    changed_at: datetime.datetime
    email: str = Field(default="", description="Correo de quien hizo el cambio.")
