import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qrmenu.core.config import CORS_ORIGINS, DATABASE_URL, ENV, SEED_DEMO_DATA
from qrmenu.core.database import Base, SessionLocal, engine
from qrmenu.core.errors import register_error_handlers
from qrmenu.core.logging_setup import configure_logging
from qrmenu.core.startup_checks import (
    ensure_migrations_applied,
    validate_database_environment,
    validate_session_secret,
)
from qrmenu.middleware.observability import ObservabilityMiddleware
from qrmenu.middleware.session import SessionMiddleware
import qrmenu.models  # noqa: F401  models must be registered before create_all
from qrmenu.routers.auth import router as auth_router
from qrmenu.routers.chat import router as chat_router
from qrmenu.routers.menu_items import router as menu_items_router
from qrmenu.routers.menus import router as menus_router
from qrmenu.routers.public_menu import router as public_menu_router
from qrmenu.routers.restaurants import router as restaurants_router
from qrmenu.services.demo_seed import seed_demo_restaurant

configure_logging()

logger = logging.getLogger(__name__)
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini")))


def _startup_tasks() -> None:
    validate_database_environment()
    validate_session_secret()

    if DATABASE_URL.startswith("sqlite"):
        # Local SQLite databases are created in place; other backends go through alembic.
        Base.metadata.create_all(bind=engine)
    else:
        ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)

    if SEED_DEMO_DATA:
        db = SessionLocal()
        try:
            seed_demo_restaurant(db)
        finally:
            db.close()

    logger.info("startup complete env=%s", ENV)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="QR Menu API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SessionMiddleware)
app.add_middleware(ObservabilityMiddleware)

register_error_handlers(app)

app.include_router(auth_router)
app.include_router(restaurants_router)
app.include_router(chat_router)
app.include_router(menus_router)
app.include_router(menu_items_router)
app.include_router(public_menu_router)


@app.get("/")
def root():
    return {"status": "ok", "service": "qrmenu"}


@app.get("/health")
def health():
    return {"status": "ok"}
