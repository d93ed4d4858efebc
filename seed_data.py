"""Seed data script for the Tablero de OTs database.

Populates the database with demo users and work orders for development.
The script is idempotent: it checks for existing records before inserting.

Stage dates are replayed through the stage resolver in the order they were
recorded, so ``status``/``progress``/``location`` of every demo order match
what the API would have derived.

Usage (from the project root):
    python seed_data.py
"""

from __future__ import annotations

from datetime import date, timedelta

from ot_dashboard.database import Base, SessionLocal, engine
from ot_dashboard.models import Issue, IssueNote, Usuario, WorkOrder, WorkOrderDate
from ot_dashboard.services.stage_resolver import resolve_stage_transition
from ot_dashboard.utils.constants import (
    ANTI_STAGES,
    INCO_STAGES,
    LOCATION_INCO,
    ROL_ADMIN,
    ROL_CONSULTA,
    ROL_OPERADOR,
    STATUS_SIN_INICIAR,
)
from ot_dashboard.utils.security import hash_password

# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

HOY = date.today()

USUARIOS = [
    ("admin@tablero-ot.local", "Admin123!", "Administrador", ROL_ADMIN),
    ("operador@tablero-ot.local", "Operador123!", "Operador de Taller", ROL_OPERADOR),
    ("consulta@tablero-ot.local", "Consulta123!", "Usuario Consulta", ROL_CONSULTA),
]

# (ot, client, description, tag, priority, confirmed stages, planned stages)
ORDENES = [
    ("24-0101", "Minera Los Andes", "Bomba centrífuga 6x4, overhaul", "P-2041", True,
     ["Recepción", "Desarme", "Inspección"], ["Reparación", "Armado"]),
    ("24-0102", "Celulosa del Sur", "Reductor de velocidad", "GR-118", False,
     ["Recepción", "Desarme"], ["Inspección"]),
    ("24-0103", "Agua Potable Norte", "Válvula mariposa DN600", "V-330", False,
     [], ["Recepción"]),
    ("24-0104", "Minera Los Andes", "Impulsor de bomba slurry", "P-2044", True,
     [s.name for s in INCO_STAGES] + ["Arenado", "Anticorrosivo"], ["Pintura"]),
    ("24-0105", "Portuaria Central", "Carcasa de compresor", "C-07", False,
     [s.name for s in INCO_STAGES] + [s.name for s in ANTI_STAGES], []),
]


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


def seed_usuarios(session) -> Usuario:
    if session.query(Usuario).count() > 0:
        print("  [SKIP] Usuario — table already has data.")
        return session.query(Usuario).filter(Usuario.rol == ROL_ADMIN).first()

    registros = [
        Usuario(
            email=email,
            password_hash=hash_password(password),
            nombre_completo=nombre,
            rol=rol,
            activo=True,
        )
        for email, password, nombre, rol in USUARIOS
    ]
    session.add_all(registros)
    session.flush()
    print(f"  [OK] Usuario — {len(registros)} registros insertados.")
    return registros[0]


def _replay(work_order: WorkOrder, stage: str, fecha: date, confirmed: bool, user_id: int) -> None:
    row = WorkOrderDate(
        stage=stage, date=fecha, confirmed=confirmed,
        created_by=user_id, updated_by=user_id,
    )
    work_order.dates.append(row)
    resolution = resolve_stage_transition(work_order.dates, work_order.location, stage, confirmed)
    for field, value in resolution.as_update().items():
        setattr(work_order, field, value)


def seed_work_orders(session, admin: Usuario | None) -> list[WorkOrder]:
    if session.query(WorkOrder).count() > 0:
        print("  [SKIP] WorkOrder — table already has data.")
        return []

    user_id = admin.id if admin is not None else None
    registros: list[WorkOrder] = []
    for ot, client, description, tag, priority, confirmadas, planificadas in ORDENES:
        work_order = WorkOrder(
            ot=ot, client=client, description=description, tag=tag,
            location=LOCATION_INCO, status=STATUS_SIN_INICIAR, progress=0,
            priority=priority, created_by=user_id, updated_by=user_id,
        )
        inicio = HOY - timedelta(days=4 * len(confirmadas) + 2)
        for i, stage in enumerate(confirmadas):
            _replay(work_order, stage, inicio + timedelta(days=4 * i), True, user_id)
        for i, stage in enumerate(planificadas, start=1):
            _replay(work_order, stage, HOY + timedelta(days=3 * i), False, user_id)
        session.add(work_order)
        registros.append(work_order)

    session.flush()
    print(f"  [OK] WorkOrder — {len(registros)} registros insertados.")
    return registros


def seed_issues(session, work_orders: list[WorkOrder], admin: Usuario | None) -> None:
    if not work_orders or session.query(Issue).count() > 0:
        print("  [SKIP] Issue — nothing to insert.")
        return

    user_id = admin.id if admin is not None else None
    issue = Issue(
        work_order_id=work_orders[0].id,
        stage="Reparación",
        title="Repuesto de sello mecánico con atraso",
        description="Proveedor informa despacho para la próxima semana.",
        priority="HIGH",
        delay_start_date=HOY - timedelta(days=3),
        created_by=user_id,
    )
    session.add(issue)
    session.flush()
    session.add(IssueNote(issue_id=issue.id, content="Se solicitó alternativa a bodega central.",
                          created_by=user_id))
    session.add(Issue(
        work_order_id=work_orders[1].id,
        stage="Desarme",
        title="Pernos de carcasa agripados",
        priority="LOW",
        status="RESOLVED",
        delay_start_date=HOY - timedelta(days=6),
        delay_end_date=HOY - timedelta(days=5),
        created_by=user_id,
    ))
    print("  [OK] Issue — 2 registros insertados.")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    print("=" * 60)
    print("  Tablero de OTs — Seed de datos de demostración")
    print("=" * 60)

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        print("\n[1/3] Usuarios...")
        admin = seed_usuarios(session)

        print("\n[2/3] Órdenes de trabajo + fechas de etapa...")
        work_orders = seed_work_orders(session, admin)

        print("\n[3/3] Problemas + notas...")
        seed_issues(session, work_orders, admin)

        session.commit()
        print("\n" + "=" * 60)
        print("  Seed completado exitosamente.")
        print("=" * 60)

    except Exception as exc:
        session.rollback()
        print("\n[ERROR] Seed fallido — se hizo rollback.")
        print(f"  Detalle: {exc}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
