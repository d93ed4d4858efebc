import datetime

from conftest import auth, create_ot

from ot_dashboard.models import Issue
from ot_dashboard.services.issue_service import calculate_delay_days


def _issue(client, user, work_order_id, **extra):
    payload = {"work_order_id": work_order_id, "title": "Falta repuesto", **extra}
    return client.post("/api/issues", json=payload, headers=auth(user))


def test_delay_days_is_inclusive():
    issue = Issue(
        delay_start_date=datetime.date(2026, 1, 1),
        delay_end_date=datetime.date(2026, 1, 3),
    )
    assert calculate_delay_days(issue) == 3


def test_open_delay_counts_until_today():
    issue = Issue(delay_start_date=datetime.date(2026, 1, 1))
    assert calculate_delay_days(issue, today=datetime.date(2026, 1, 10)) == 10


def test_issue_without_window_has_no_delay():
    assert calculate_delay_days(Issue()) == 0


def test_create_issue_and_total_delay(client, admin, operador):
    wo = create_ot(client, admin)
    resp = _issue(
        client, operador, wo["id"],
        priority="HIGH", delay_start_date="2026-02-01", delay_end_date="2026-02-04",
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["status"] == "OPEN"
    assert body["delay_days"] == 4

    detail = client.get(f"/api/work-orders/{wo['id']}", headers=auth(admin)).json()
    assert detail["retraso_total"] == 4


def test_inverted_window_is_rejected(client, admin):
    wo = create_ot(client, admin)
    resp = _issue(
        client, admin, wo["id"],
        delay_start_date="2026-02-04", delay_end_date="2026-02-01",
    )
    assert resp.status_code == 422


def test_invalid_priority_is_rejected(client, admin):
    wo = create_ot(client, admin)
    assert _issue(client, admin, wo["id"], priority="URGENTE").status_code == 422


def test_issue_for_missing_work_order(client, admin):
    assert _issue(client, admin, 999).status_code == 404


def test_resolve_issue_and_add_note(client, admin):
    wo = create_ot(client, admin)
    issue = _issue(client, admin, wo["id"]).json()

    resp = client.put(
        f"/api/issues/{issue['id']}",
        json={"status": "RESOLVED"},
        headers=auth(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "RESOLVED"
    assert resp.json()["title"] == "Falta repuesto"

    note = client.post(
        f"/api/issues/{issue['id']}/notes",
        json={"content": "Repuesto recibido"},
        headers=auth(admin),
    )
    assert note.status_code == 201
    assert note.json()["user_email"] == "admin@taller.cl"

    listed = client.get(
        "/api/issues", params={"work_order_id": wo["id"]}, headers=auth(admin)
    ).json()
    assert len(listed) == 1
    assert listed[0]["notes"][0]["content"] == "Repuesto recibido"


def test_update_cannot_invert_stored_window(client, admin):
    wo = create_ot(client, admin)
    issue = _issue(client, admin, wo["id"], delay_start_date="2026-02-10").json()
    resp = client.put(
        f"/api/issues/{issue['id']}",
        json={"delay_end_date": "2026-02-01"},
        headers=auth(admin),
    )
    assert resp.status_code == 422


def test_issue_and_note_appear_in_history(client, admin):
    wo = create_ot(client, admin)
    issue = _issue(client, admin, wo["id"]).json()
    client.post(
        f"/api/issues/{issue['id']}/notes",
        json={"content": "Se pidió cotización"},
        headers=auth(admin),
    )
    history = client.get(f"/api/work-orders/{wo['id']}/history", headers=auth(admin)).json()
    types = {entry["type"] for entry in history}
    assert {"issue", "note"} <= types
    assert any(e["description"] == "Nuevo problema: Falta repuesto" for e in history)
