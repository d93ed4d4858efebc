import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ot_dashboard.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _seed_admin_user() -> None:
    """Create the initial admin account if no users exist in the database."""
    from ot_dashboard.database import SessionLocal
    from ot_dashboard.models.usuario import Usuario
    from ot_dashboard.utils.constants import ROL_ADMIN
    from ot_dashboard.utils.security import hash_password

    db = SessionLocal()
    try:
        count = db.query(Usuario).count()
        logger.info("Usuarios en BD: %d", count)
        if count:
            return
        db.add(
            Usuario(
                email=settings.ADMIN_EMAIL.strip().lower(),
                password_hash=hash_password(settings.ADMIN_PASSWORD),
                nombre_completo="Administrador",
                rol=ROL_ADMIN,
                activo=True,
            )
        )
        db.commit()
        logger.info("Admin inicial creado: %s", settings.ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: seed admin user if DB is empty
    _seed_admin_user()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from ot_dashboard.routers import auth  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])

# Administración de usuarios
from ot_dashboard.routers import usuarios  # noqa: E402

app.include_router(
    usuarios.router,
    prefix="/api/usuarios",
    tags=["Usuarios"],
)

# Tablero de OTs
from ot_dashboard.routers import work_orders  # noqa: E402

app.include_router(
    work_orders.router,
    prefix="/api/work-orders",
    tags=["Órdenes de Trabajo"],
)

# Problemas y notas
from ot_dashboard.routers import issues  # noqa: E402

app.include_router(
    issues.router,
    prefix="/api/issues",
    tags=["Problemas"],
)

# Historial de cambios
from ot_dashboard.routers import history  # noqa: E402

app.include_router(
    history.router,
    prefix="/api/history",
    tags=["Historial"],
)

# Resumen
from ot_dashboard.routers import dashboard  # noqa: E402

app.include_router(
    dashboard.router,
    prefix="/api/dashboard",
    tags=["Dashboard"],
)

# Respaldo / restauración
from ot_dashboard.routers import backup  # noqa: E402

app.include_router(
    backup.router,
    prefix="/api/backup",
    tags=["Respaldo"],
)

# Notificaciones en tiempo real
from ot_dashboard.routers import realtime  # noqa: E402

app.include_router(
    realtime.router,
    prefix="/api/realtime",
)
