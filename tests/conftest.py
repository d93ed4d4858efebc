import os

# Must be set before any ot_dashboard import reads the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from ot_dashboard.database import Base, SessionLocal, engine
from ot_dashboard.main import app
from ot_dashboard.models import Usuario
from ot_dashboard.utils.constants import ROL_ADMIN, ROL_CONSULTA, ROL_OPERADOR
from ot_dashboard.utils.security import create_access_token, hash_password


@pytest.fixture(autouse=True)
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    # No context manager: the startup admin seed stays out of the tests
    return TestClient(app)


def _make_user(db, email, rol):
    user = Usuario(
        email=email,
        password_hash=hash_password("Secreto123!"),
        nombre_completo=email.split("@")[0].title(),
        rol=rol,
        activo=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@taller.cl", ROL_ADMIN)


@pytest.fixture
def operador(db):
    return _make_user(db, "operador@taller.cl", ROL_OPERADOR)


@pytest.fixture
def consulta(db):
    return _make_user(db, "consulta@taller.cl", ROL_CONSULTA)


def token_for(user):
    return create_access_token({"sub": str(user.id), "rol": user.rol})


def auth(user):
    return {"Authorization": f"Bearer {token_for(user)}"}


def create_ot(client, admin, ot="24-0001", client_name="Minera Los Andes"):
    resp = client.post(
        "/api/work-orders",
        json={"ot": ot, "client": client_name, "description": "Bomba", "tag": "P-1"},
        headers=auth(admin),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def put_date(client, user, ot, stage, date="2026-03-02", confirmed=True):
    return client.put(
        f"/api/work-orders/{ot}/dates",
        json={"stage": stage, "date": date, "confirmed": confirmed},
        headers=auth(user),
    )
