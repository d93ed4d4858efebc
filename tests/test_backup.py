import json

from conftest import auth, create_ot, put_date

from ot_dashboard.models import WorkOrder


def _upload(client, user, content):
    return client.post(
        "/api/backup/restore",
        files={"file": ("backup.json", content, "application/json")},
        headers=auth(user),
    )


def test_backup_and_restore_round_trip(client, admin, db):
    wo = create_ot(client, admin)
    put_date(client, admin, "24-0001", "Recepción")
    client.post(
        "/api/issues",
        json={"work_order_id": wo["id"], "title": "Falta repuesto"},
        headers=auth(admin),
    )

    resp = client.get("/api/backup", headers=auth(admin))
    assert resp.status_code == 200
    assert resp.headers["content-disposition"].startswith('attachment; filename="backup_')
    snapshot = resp.json()
    assert snapshot["version"] == 1
    assert [row["ot"] for row in snapshot["work_orders"]] == ["24-0001"]
    assert len(snapshot["work_order_dates"]) == 1
    assert len(snapshot["issues"]) == 1

    create_ot(client, admin, ot="24-0002")

    resp = _upload(client, admin, json.dumps(snapshot))
    assert resp.status_code == 200, resp.text

    db.expire_all()
    assert [row.ot for row in db.query(WorkOrder).all()] == ["24-0001"]
    board = client.get("/api/work-orders", headers=auth(admin)).json()
    restored = board["inco"][0]
    assert restored["status"] == "Recepción"
    assert restored["dates"]["Recepción"]["confirmed"] is True


def test_restore_nulls_unknown_authors(client, admin, db):
    create_ot(client, admin)
    snapshot = client.get("/api/backup", headers=auth(admin)).json()
    snapshot["work_orders"][0]["created_by"] = 4242

    assert _upload(client, admin, json.dumps(snapshot)).status_code == 200
    db.expire_all()
    assert db.query(WorkOrder).one().created_by is None


def test_invalid_backup_is_rejected_without_changes(client, admin, db):
    create_ot(client, admin)
    assert _upload(client, admin, "{not json").status_code == 422

    snapshot = client.get("/api/backup", headers=auth(admin)).json()
    snapshot["version"] = 99
    assert _upload(client, admin, json.dumps(snapshot)).status_code == 422

    snapshot["version"] = 1
    snapshot["work_order_dates"] = [
        {"id": 1, "work_order_id": 77, "stage": "Recepción", "confirmed": True,
         "created_at": "2026-01-01T00:00:00", "updated_at": "2026-01-01T00:00:00"}
    ]
    assert _upload(client, admin, json.dumps(snapshot)).status_code == 422

    db.expire_all()
    assert db.query(WorkOrder).count() == 1


def test_backup_requires_admin(client, operador):
    assert client.get("/api/backup", headers=auth(operador)).status_code == 403
