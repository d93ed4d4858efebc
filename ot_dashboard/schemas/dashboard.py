"""
Pydantic v2 schemas for the summary dashboard (``GET /api/dashboard/resumen``).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class TiempoPromedio(BaseModel):
    """Average cycle time in days, ``None`` when no order qualifies."""

    total: int | None = None
    inco: int | None = None
    anti: int | None = None


class OrdenPrioritaria(BaseModel):
    ot: str
    client: str
    location: str
    etapa_actual: str


class EtapaConteo(BaseModel):
    stage: str
    count: int


class DashboardResumen(BaseModel):
    """Aggregated figures behind the dashboard cards.

    Attributes:
        total: All work orders, archived included.
        en_proceso: Orders in INCO or ANTI.
        completadas: Archived orders.
        tiempo_promedio: Average days from first to last stage date.
        prioritarias: Up to three active priority orders with their stage.
        total_prioritarias: Count of active priority orders.
        problemas: Open issues per pipeline and priority.
        etapas: Per-stage confirmed counts of the orders in each pipeline.
    """

    total: int = 0
    en_proceso: int = 0
    completadas: int = 0
    tiempo_promedio: TiempoPromedio = Field(default_factory=TiempoPromedio)
    prioritarias: list[OrdenPrioritaria] = Field(default_factory=list)
    total_prioritarias: int = 0
    problemas: dict[str, dict[str, int]] = Field(default_factory=dict)
    etapas: dict[str, list[EtapaConteo]] = Field(default_factory=dict)
