"""
Summary dashboard service.

Builds the figures shown on the dashboard cards from the full set of work
orders and open issues.  Everything is aggregated in Python after a single
load, which is adequate for the size of a workshop's order book and keeps
the SQL portable across PostgreSQL and SQLite.

Average cycle time
------------------
For a list of orders and a stage sequence, the orders considered are those
with a date on both the first and the last stage of the sequence; the
average of ``last - first`` in days is rounded half-up.  The combined figure
uses the INCO sequence followed by the ANTI one (Recepción → Despacho).
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from sqlalchemy.orm import Session

from ot_dashboard.models.issue import Issue
from ot_dashboard.models.work_order import WorkOrder
from ot_dashboard.schemas.dashboard import (
    DashboardResumen,
    EtapaConteo,
    OrdenPrioritaria,
    TiempoPromedio,
)
from ot_dashboard.services.stage_resolver import (
    get_last_confirmed_stage,
    stages_for_location,
)
from ot_dashboard.services.work_order_service import load_work_orders
from ot_dashboard.utils.constants import (
    ANTI_STAGES,
    INCO_STAGES,
    ISSUE_OPEN,
    LOCATION_ANTI,
    LOCATION_ARCHIVED,
    LOCATION_INCO,
    PRIORIDADES_ISSUE,
    STATUS_SIN_INICIAR,
    Stage,
)

logger = logging.getLogger(__name__)

_MAX_PRIORITARIAS = 3


def _dated(work_order: WorkOrder) -> dict:
    return {row.stage: row for row in work_order.dates if row.date is not None}


def average_cycle_days(
    work_orders: Sequence[WorkOrder],
    stages: Sequence[Stage],
) -> int | None:
    """Average days between the first and last stage dates, or ``None``."""
    first, last = stages[0].name, stages[-1].name
    spans: list[int] = []
    for work_order in work_orders:
        dates = _dated(work_order)
        if first in dates and last in dates:
            spans.append((dates[last].date - dates[first].date).days)
    if not spans:
        return None
    return math.floor(sum(spans) / len(spans) + 0.5)


def current_stage_name(work_order: WorkOrder) -> str:
    """Name of the last confirmed stage of an active order, or ``"Sin iniciar"``."""
    stage = get_last_confirmed_stage(
        work_order.dates, stages_for_location(work_order.location)
    )
    return stage.name if stage is not None else STATUS_SIN_INICIAR


def _confirmed_counts(
    work_orders: Sequence[WorkOrder],
    stages: Sequence[Stage],
) -> list[EtapaConteo]:
    counts: list[EtapaConteo] = []
    for stage in stages:
        count = sum(
            1
            for work_order in work_orders
            if any(row.stage == stage.name and row.confirmed for row in work_order.dates)
        )
        counts.append(EtapaConteo(stage=stage.name, count=count))
    return counts


def _open_issue_counts(
    issues: Sequence[Issue],
    work_order_ids: set[int],
) -> dict[str, int]:
    counts = {prioridad: 0 for prioridad in PRIORIDADES_ISSUE}
    for issue in issues:
        if issue.work_order_id in work_order_ids and issue.priority in counts:
            counts[issue.priority] += 1
    return counts


def get_resumen(db: Session) -> DashboardResumen:
    """Aggregate every figure behind the dashboard cards."""
    work_orders = load_work_orders(db)
    inco = [wo for wo in work_orders if wo.location == LOCATION_INCO]
    anti = [wo for wo in work_orders if wo.location == LOCATION_ANTI]
    archived = [wo for wo in work_orders if wo.location == LOCATION_ARCHIVED]
    active = inco + anti

    open_issues = db.query(Issue).filter(Issue.status == ISSUE_OPEN).all()

    prioritarias = [wo for wo in active if wo.priority]

    resumen = DashboardResumen(
        total=len(work_orders),
        en_proceso=len(active),
        completadas=len(archived),
        tiempo_promedio=TiempoPromedio(
            total=average_cycle_days(active, INCO_STAGES + ANTI_STAGES),
            inco=average_cycle_days(inco, INCO_STAGES),
            anti=average_cycle_days(anti, ANTI_STAGES),
        ),
        prioritarias=[
            OrdenPrioritaria(
                ot=wo.ot,
                client=wo.client,
                location=wo.location,
                etapa_actual=current_stage_name(wo),
            )
            for wo in prioritarias[:_MAX_PRIORITARIAS]
        ],
        total_prioritarias=len(prioritarias),
        problemas={
            LOCATION_INCO: _open_issue_counts(open_issues, {wo.id for wo in inco}),
            LOCATION_ANTI: _open_issue_counts(open_issues, {wo.id for wo in anti}),
        },
        etapas={
            LOCATION_INCO: _confirmed_counts(inco, INCO_STAGES),
            LOCATION_ANTI: _confirmed_counts(anti, ANTI_STAGES),
        },
    )

    logger.info(
        "get_resumen: total=%d en_proceso=%d completadas=%d prioritarias=%d",
        resumen.total, resumen.en_proceso, resumen.completadas, resumen.total_prioritarias,
    )
    return resumen
