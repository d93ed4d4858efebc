"""
Stage transition resolver for INCO / ANTI work orders.

Given every stage date currently stored for one work order and the location
the order had *before* the triggering write, decides the order's new
``status``, ``progress`` and ``location``.

Rules
-----
1. The current stage is the highest-ordinal stage of the pipeline's sequence
   that has a confirmed date.  The scan walks the sequence in order and keeps
   overwriting its pointer, so write order never matters.
2. ARCHIVED orders are frozen: nothing is derived for them.
3. An INCO order with a confirmed ``Anticorr`` date moves to ANTI.
   An ANTI order whose triggering write confirmed ``Despacho`` is archived.
4. Status, progress and location are only ever emitted together.  With no
   confirmed stage the resolution is empty, including any location change.

The module performs no I/O and holds no state; ``work_order_service`` applies
the resolution to the ORM row and records history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from ot_dashboard.utils.constants import (
    ANTI_STAGES,
    INCO_STAGES,
    LOCATION_ANTI,
    LOCATION_ARCHIVED,
    LOCATION_INCO,
    STAGE_ANTICORR,
    STAGE_DESPACHO,
    Stage,
)


@dataclass(frozen=True)
class StageResolution:
    """Derived fields to write back to a work order.

    All three attributes are ``None`` when nothing must change (archived
    order, or no confirmed stage yet).

    Attributes:
        status: Name of the last confirmed stage.
        progress: Progress percentage configured for that stage.
        location: Location after applying the pipeline hand-off rules.
    """

    status: str | None = None
    progress: int | None = None
    location: str | None = None

    @property
    def is_noop(self) -> bool:
        return self.status is None

    def as_update(self) -> dict[str, Any]:
        """Return the fields to assign, empty for a no-op resolution."""
        if self.is_noop:
            return {}
        return {
            "status": self.status,
            "progress": self.progress,
            "location": self.location,
        }


def stages_for_location(
    location: str | None,
    inco_stages: Sequence[Stage] = INCO_STAGES,
    anti_stages: Sequence[Stage] = ANTI_STAGES,
) -> tuple[Stage, ...]:
    """Return the stage sequence scanned for an order in *location*.

    Unknown locations (ARCHIVED included) span both pipelines.
    """
    if location == LOCATION_INCO:
        return tuple(inco_stages)
    if location == LOCATION_ANTI:
        return tuple(anti_stages)
    return tuple(inco_stages) + tuple(anti_stages)


def _is_confirmed(dates: Iterable[Any], stage_name: str) -> bool:
    return any(d.stage == stage_name and d.confirmed for d in dates)


def get_last_confirmed_stage(
    dates: Iterable[Any],
    stages: Sequence[Stage],
) -> Stage | None:
    """Return the highest-ordinal stage in *stages* with a confirmed date.

    Args:
        dates: Objects exposing ``stage`` and ``confirmed`` attributes
            (``WorkOrderDate`` rows or equivalent).
        stages: Ordered stage sequence to scan.

    Returns:
        The winning ``Stage`` or ``None`` when no stage is confirmed.
    """
    dates = list(dates)
    last: Stage | None = None
    for stage in stages:
        if _is_confirmed(dates, stage.name):
            last = stage
    return last


def resolve_stage_transition(
    all_dates: Iterable[Any],
    location: str,
    just_confirmed_stage: str,
    just_confirmed: bool,
    inco_stages: Sequence[Stage] = INCO_STAGES,
    anti_stages: Sequence[Stage] = ANTI_STAGES,
) -> StageResolution:
    """Compute the post-write status, progress and location of a work order.

    Args:
        all_dates: Every stage date of the order, the triggering write
            already merged in.
        location: The order's location before the write.
        just_confirmed_stage: Stage name of the triggering write.
        just_confirmed: Confirmed flag of the triggering write.
        inco_stages: INCO sequence (defaults to the configured one).
        anti_stages: ANTI sequence (defaults to the configured one).

    Returns:
        A ``StageResolution``; empty when the order is archived or has no
        confirmed stage.
    """
    if location == LOCATION_ARCHIVED:
        return StageResolution()

    all_dates = list(all_dates)
    stages = stages_for_location(location, inco_stages, anti_stages)
    last_stage = get_last_confirmed_stage(all_dates, stages)

    new_location = location
    if location == LOCATION_INCO and _is_confirmed(all_dates, STAGE_ANTICORR):
        new_location = LOCATION_ANTI
    elif (
        location == LOCATION_ANTI
        and just_confirmed_stage == STAGE_DESPACHO
        and just_confirmed
    ):
        new_location = LOCATION_ARCHIVED

    if last_stage is None:
        return StageResolution()

    return StageResolution(
        status=last_stage.name,
        progress=last_stage.progress,
        location=new_location,
    )
