from collections import namedtuple

from ot_dashboard.services.stage_resolver import (
    StageResolution,
    get_last_confirmed_stage,
    resolve_stage_transition,
    stages_for_location,
)
from ot_dashboard.utils.constants import ANTI_STAGES, INCO_STAGES, Stage

D = namedtuple("D", "stage confirmed")

SMALL_INCO = (Stage("Recepción", 10), Stage("Anticorr", 50), Stage("Pintura", 80))


def test_last_confirmed_stage_is_highest_ordinal_not_latest_write():
    dates = [D("Armado", True), D("Recepción", True), D("Desarme", False)]
    assert get_last_confirmed_stage(dates, INCO_STAGES).name == "Armado"
    assert get_last_confirmed_stage(list(reversed(dates)), INCO_STAGES).name == "Armado"


def test_unconfirmed_dates_are_ignored():
    assert get_last_confirmed_stage([D("Recepción", False)], INCO_STAGES) is None


def test_stages_for_unknown_location_span_both_pipelines():
    assert stages_for_location(None) == INCO_STAGES + ANTI_STAGES
    assert stages_for_location("INCO") == INCO_STAGES
    assert stages_for_location("ANTI") == ANTI_STAGES


def test_inco_example_moves_to_anti():
    dates = [D("Recepción", True), D("Anticorr", True)]
    result = resolve_stage_transition(dates, "INCO", "Anticorr", True, inco_stages=SMALL_INCO)
    assert result == StageResolution(status="Anticorr", progress=50, location="ANTI")


def test_anti_example_archives_on_despacho():
    dates = [D(stage.name, True) for stage in ANTI_STAGES]
    result = resolve_stage_transition(dates, "ANTI", "Despacho", True)
    assert result == StageResolution(status="Despacho", progress=100, location="ARCHIVED")


def test_despacho_not_triggering_write_does_not_archive():
    dates = [D(stage.name, True) for stage in ANTI_STAGES]
    result = resolve_stage_transition(dates, "ANTI", "Pintura", True)
    assert result.location == "ANTI"
    assert result.status == "Despacho"


def test_unconfirming_despacho_does_not_archive():
    dates = [D("Arenado", True), D("Despacho", False)]
    result = resolve_stage_transition(dates, "ANTI", "Despacho", False)
    assert result == StageResolution(status="Arenado", progress=20, location="ANTI")


def test_archived_is_frozen():
    dates = [D(stage.name, True) for stage in INCO_STAGES + ANTI_STAGES]
    result = resolve_stage_transition(dates, "ARCHIVED", "Recepción", True)
    assert result.is_noop
    assert result.as_update() == {}


def test_no_confirmed_stage_is_noop():
    result = resolve_stage_transition([D("Recepción", False)], "INCO", "Recepción", False)
    assert result.is_noop
    assert result.location is None


def test_resolution_is_idempotent():
    dates = [D("Recepción", True), D("Desarme", True)]
    first = resolve_stage_transition(dates, "INCO", "Desarme", True)
    second = resolve_stage_transition(dates, first.location, "Desarme", True)
    assert first == second == StageResolution(status="Desarme", progress=15, location="INCO")


def test_inco_without_anticorr_stays():
    result = resolve_stage_transition([D("Pruebas", True)], "INCO", "Pruebas", True)
    assert result.location == "INCO"
    assert result.progress == 85


def test_confirmed_anticorr_moves_to_anti_whatever_the_other_stages():
    dates = [D("Recepción", False), D("Desarme", False), D("Anticorr", True)]
    result = resolve_stage_transition(dates, "INCO", "Recepción", False)
    assert result == StageResolution(status="Anticorr", progress=100, location="ANTI")


def test_unknown_location_resolves_over_both_pipelines():
    dates = [D("Recepción", True), D("Pruebas", True), D("Arenado", True)]
    result = resolve_stage_transition(dates, "FOO", "Arenado", True)
    assert result == StageResolution(status="Arenado", progress=20, location="FOO")
