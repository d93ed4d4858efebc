from conftest import auth


def _login(client, email, password):
    return client.post("/api/auth/login", data={"username": email, "password": password})


def test_login_returns_token_usable_on_me(client, operador):
    resp = _login(client, "Operador@Taller.cl", "Secreto123!")
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["email"] == "operador@taller.cl"
    assert me["rol"] == "OPERADOR"
    assert me["es_admin"] is False


def test_login_rejects_wrong_password(client, operador):
    assert _login(client, "operador@taller.cl", "incorrecta").status_code == 401


def test_inactive_user_cannot_log_in(client, operador, db):
    operador.activo = False
    db.commit()
    assert _login(client, "operador@taller.cl", "Secreto123!").status_code == 401


def test_refresh_issues_new_token(client, admin):
    resp = client.post("/api/auth/refresh", headers=auth(admin))
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"


def test_admin_flag_comes_from_role(client, admin):
    assert client.get("/api/auth/me", headers=auth(admin)).json()["es_admin"] is True


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"


def test_admin_manages_users(client, admin):
    resp = client.post(
        "/api/usuarios",
        json={
            "email": "nuevo@taller.cl",
            "password": "Taller2026!",
            "nombre_completo": "Nuevo Operador",
            "rol": "OPERADOR",
        },
        headers=auth(admin),
    )
    assert resp.status_code == 201, resp.text
    user_id = resp.json()["id"]

    dup = client.post(
        "/api/usuarios",
        json={"email": "nuevo@taller.cl", "password": "Taller2026!", "nombre_completo": "Otro"},
        headers=auth(admin),
    )
    assert dup.status_code == 409

    resp = client.put(f"/api/usuarios/{user_id}", json={"rol": "ADMIN"}, headers=auth(admin))
    assert resp.json()["es_admin"] is True

    emails = [u["email"] for u in client.get("/api/usuarios", headers=auth(admin)).json()]
    assert "nuevo@taller.cl" in emails


def test_invalid_role_is_rejected(client, admin):
    resp = client.post(
        "/api/usuarios",
        json={"email": "x@taller.cl", "password": "Taller2026!", "nombre_completo": "Xxx", "rol": "JEFE"},
        headers=auth(admin),
    )
    assert resp.status_code == 422


def test_user_admin_requires_admin(client, consulta):
    assert client.get("/api/usuarios", headers=auth(consulta)).status_code == 403
