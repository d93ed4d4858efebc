from types import SimpleNamespace
import datetime

from conftest import auth, create_ot, put_date

from ot_dashboard.services.dashboard_service import average_cycle_days
from ot_dashboard.utils.constants import INCO_STAGES


def _order(*dated):
    return SimpleNamespace(
        dates=[SimpleNamespace(stage=s, date=d, confirmed=True) for s, d in dated]
    )


def test_average_rounds_half_up():
    orders = [
        _order(("Recepción", datetime.date(2026, 1, 1)), ("Anticorr", datetime.date(2026, 1, 3))),
        _order(("Recepción", datetime.date(2026, 1, 1)), ("Anticorr", datetime.date(2026, 1, 2))),
    ]
    # (2 + 1) / 2 = 1.5
    assert average_cycle_days(orders, INCO_STAGES) == 2


def test_average_skips_orders_without_both_ends():
    orders = [_order(("Recepción", datetime.date(2026, 1, 1)))]
    assert average_cycle_days(orders, INCO_STAGES) is None


def test_resumen(client, admin):
    a = create_ot(client, admin, ot="A")
    b = create_ot(client, admin, ot="B")
    put_date(client, admin, "A", "Recepción", date="2026-01-01")
    put_date(client, admin, "A", "Anticorr", date="2026-01-11", confirmed=False)
    put_date(client, admin, "B", "Recepción", date="2026-01-01")
    put_date(client, admin, "B", "Anticorr", date="2026-01-04", confirmed=False)

    client.put(f"/api/work-orders/{a['id']}/priority", json={"priority": True}, headers=auth(admin))
    client.post(
        "/api/issues",
        json={"work_order_id": a["id"], "title": "Sello dañado", "priority": "HIGH"},
        headers=auth(admin),
    )
    resolved = client.post(
        "/api/issues",
        json={"work_order_id": b["id"], "title": "Pernos", "priority": "LOW"},
        headers=auth(admin),
    ).json()
    client.put(f"/api/issues/{resolved['id']}", json={"status": "RESOLVED"}, headers=auth(admin))

    body = client.get("/api/dashboard/resumen", headers=auth(admin)).json()

    assert body["total"] == 2
    assert body["en_proceso"] == 2
    assert body["completadas"] == 0
    # (10 + 3) / 2 = 6.5
    assert body["tiempo_promedio"] == {"total": None, "inco": 7, "anti": None}
    assert body["prioritarias"] == [
        {"ot": "A", "client": "Minera Los Andes", "location": "INCO", "etapa_actual": "Recepción"}
    ]
    assert body["total_prioritarias"] == 1
    assert body["problemas"]["INCO"] == {"LOW": 0, "MEDIUM": 0, "HIGH": 1, "CRITICAL": 0}
    assert body["problemas"]["ANTI"]["HIGH"] == 0
    inco_counts = {row["stage"]: row["count"] for row in body["etapas"]["INCO"]}
    assert inco_counts["Recepción"] == 2
    assert inco_counts["Anticorr"] == 0
