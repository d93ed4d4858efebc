import datetime

from conftest import auth, create_ot, put_date

from ot_dashboard.database import SessionLocal
from ot_dashboard.models import WorkOrder, WorkOrderDate
from ot_dashboard.schemas.work_order import StageDateUpdate
from ot_dashboard.services import work_order_service
from ot_dashboard.utils.constants import ANTI_STAGES, INCO_STAGES


def _confirm_all(client, user, ot, stages):
    for stage in stages:
        resp = put_date(client, user, ot, stage.name)
        assert resp.status_code == 200, resp.text
    return resp.json()


def test_create_work_order_starts_in_inco(client, admin):
    body = create_ot(client, admin)
    assert body["location"] == "INCO"
    assert body["status"] == "Sin iniciar"
    assert body["progress"] == 0
    assert body["priority"] is False
    assert body["dates"] == {}


def test_duplicate_ot_conflicts(client, admin):
    create_ot(client, admin, ot="24-0009")
    resp = client.post(
        "/api/work-orders",
        json={"ot": "24-0009", "client": "Otro"},
        headers=auth(admin),
    )
    assert resp.status_code == 409


def test_only_admin_creates(client, operador):
    resp = client.post(
        "/api/work-orders", json={"ot": "1", "client": "X"}, headers=auth(operador)
    )
    assert resp.status_code == 403


def test_blank_ot_is_rejected(client, admin):
    resp = client.post(
        "/api/work-orders", json={"ot": "   ", "client": "X"}, headers=auth(admin)
    )
    assert resp.status_code == 422
    assert client.get("/api/work-orders", headers=auth(admin)).json()["inco"] == []


def test_ot_with_slash_is_rejected(client, admin):
    resp = client.post(
        "/api/work-orders", json={"ot": "24/0001", "client": "X"}, headers=auth(admin)
    )
    assert resp.status_code == 422


def test_ot_is_stored_stripped(client, admin):
    body = create_ot(client, admin, ot="  24-0002 ")
    assert body["ot"] == "24-0002"
    assert put_date(client, admin, "24-0002", "Recepción").status_code == 200


def test_requires_token(client):
    assert client.get("/api/work-orders").status_code == 401


def test_consulta_cannot_edit_dates(client, admin, consulta):
    create_ot(client, admin)
    resp = put_date(client, consulta, "24-0001", "Recepción")
    assert resp.status_code == 403


def test_confirming_stage_updates_status_and_progress(client, admin, operador):
    create_ot(client, admin)
    resp = put_date(client, operador, "24-0001", "Recepción")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "Recepción"
    assert body["progress"] == 5
    assert body["dates"]["Recepción"] == {"date": "2026-03-02", "confirmed": True}


def test_planned_date_does_not_change_status(client, admin):
    create_ot(client, admin)
    body = put_date(client, admin, "24-0001", "Desarme", confirmed=False).json()
    assert body["status"] == "Sin iniciar"
    assert body["dates"]["Desarme"]["confirmed"] is False


def test_stage_date_is_upserted(client, admin, db):
    wo = create_ot(client, admin)
    put_date(client, admin, "24-0001", "Recepción", confirmed=False)
    put_date(client, admin, "24-0001", "Recepción", date="2026-03-05", confirmed=True)
    db.expire_all()
    rows = db.query(WorkOrderDate).filter(WorkOrderDate.work_order_id == wo["id"]).all()
    assert len(rows) == 1
    assert rows[0].confirmed is True
    assert rows[0].date.isoformat() == "2026-03-05"


def test_stage_date_inserted_by_another_session_is_updated(client, admin, db):
    create_ot(client, admin)
    work_order = db.query(WorkOrder).filter(WorkOrder.ot == "24-0001").one()
    assert work_order.dates == []

    other = SessionLocal()
    try:
        other.add(WorkOrderDate(
            work_order_id=work_order.id,
            stage="Recepción",
            date=datetime.date(2026, 3, 1),
            confirmed=False,
        ))
        other.commit()
    finally:
        other.close()

    data = StageDateUpdate(stage="Recepción", date=datetime.date(2026, 3, 2), confirmed=True)
    updated, _ = work_order_service.update_stage_date(db, "24-0001", data, admin)

    assert updated.status == "Recepción"
    assert updated.progress == 5
    rows = db.query(WorkOrderDate).filter(WorkOrderDate.work_order_id == updated.id).all()
    assert len(rows) == 1
    assert rows[0].confirmed is True
    assert rows[0].date == datetime.date(2026, 3, 2)


def test_unknown_stage_is_rejected(client, admin):
    create_ot(client, admin)
    assert put_date(client, admin, "24-0001", "Soldadura").status_code == 422


def test_unknown_ot_is_404(client, admin):
    assert put_date(client, admin, "99-9999", "Recepción").status_code == 404


def test_full_lifecycle_inco_anti_archived(client, admin):
    create_ot(client, admin)

    body = _confirm_all(client, admin, "24-0001", INCO_STAGES)
    assert body["location"] == "ANTI"
    assert body["status"] == "Anticorr"
    assert body["progress"] == 100

    body = put_date(client, admin, "24-0001", "Arenado").json()
    assert body["location"] == "ANTI"
    assert body["status"] == "Arenado"
    assert body["progress"] == 20

    body = _confirm_all(client, admin, "24-0001", ANTI_STAGES)
    assert body["location"] == "ARCHIVED"
    assert body["status"] == "Despacho"
    assert body["progress"] == 100


def test_archived_order_is_frozen(client, admin):
    create_ot(client, admin)
    _confirm_all(client, admin, "24-0001", INCO_STAGES + ANTI_STAGES)

    body = put_date(client, admin, "24-0001", "Pintura", confirmed=False).json()
    assert body["location"] == "ARCHIVED"
    assert body["status"] == "Despacho"
    assert body["dates"]["Pintura"]["confirmed"] is False


def test_board_groups_and_sorts(client, admin):
    create_ot(client, admin, ot="A")
    second = create_ot(client, admin, ot="B")
    create_ot(client, admin, ot="C")
    put_date(client, admin, "C", "Desarme")

    resp = client.put(
        f"/api/work-orders/{second['id']}/priority",
        json={"priority": True},
        headers=auth(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["priority"] is True

    board = client.get("/api/work-orders", headers=auth(admin)).json()
    assert [wo["ot"] for wo in board["inco"]] == ["B", "C", "A"]
    assert board["anti"] == []
    assert board["archived"] == []


def test_history_records_date_and_derived_changes(client, admin):
    wo = create_ot(client, admin)
    put_date(client, admin, "24-0001", "Recepción")

    history = client.get(f"/api/work-orders/{wo['id']}/history", headers=auth(admin)).json()
    by_description = {entry["description"]: entry for entry in history}
    assert by_description["Recepción: 2026-03-02 (confirmada)"]["type"] == "date"
    assert by_description["status: Recepción"]["type"] == "status"
    assert by_description["status: Recepción"]["old_value"] == "Sin iniciar"
    assert by_description["progress: 5"]["user_email"] == "admin@taller.cl"


def test_change_feed_hides_derived_fields(client, admin):
    create_ot(client, admin)
    put_date(client, admin, "24-0001", "Recepción")

    feed = client.get("/api/history", headers=auth(admin)).json()
    assert [item["field"] for item in feed] == ["Recepción"]
    assert feed[0]["ot"] == "24-0001"
    assert feed[0]["email"] == "admin@taller.cl"


def test_stages_endpoint(client, admin):
    body = client.get("/api/work-orders/stages", headers=auth(admin)).json()
    assert body["inco"][0] == {"name": "Recepción", "progress": 5}
    assert body["anti"][-1] == {"name": "Despacho", "progress": 100}
