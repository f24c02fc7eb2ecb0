import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from alembic.config import Config
from alembic import command
from archgen.core.config import settings
from archgen.core.logging import configure_logging
from archgen.api.errors import register_exception_handlers
from archgen.api.routes import router as api_router

configure_logging()
log = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def run_migrations() -> None:
    """Run Alembic migrations to head."""
    log.info("Running database migrations...")
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    command.upgrade(alembic_cfg, "head")
    log.info("Database migrations completed successfully")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    log.info("Starting API server...")
    Path(settings.workspaces_dir).mkdir(parents=True, exist_ok=True)
    if settings.run_migrations_on_startup:
        run_migrations()
    log.info("API server startup complete")
    yield
    log.info("Shutting down API server...")


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan
)
register_exception_handlers(app)
app.include_router(api_router, prefix="/v1")


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn
    uvicorn.run("archgen.main:app", host=settings.api_host, port=settings.api_port)
