from contextlib import asynccontextmanager
from fastapi import FastAPI
import logging

from taskboard.core import database
from taskboard.core.config import settings
from taskboard.models import cached_entity, pending_change  # noqa: F401  (tables)
from taskboard.routers import health, tasks, sections, projects, reminders, sync, imports
from taskboard.services.workspace import build_workspace

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Init DB locale (cache + file d'attente)
    database.Base.metadata.create_all(bind=database.engine)

    workspace = build_workspace(settings, database.SessionLocal)
    workspace.start()
    app.state.workspace = workspace
    logger.info(f"Workspace started (online={workspace.connectivity.is_online})")
    yield
    workspace.stop()


app = FastAPI(
    title="Taskboard API",
    version="0.1.0",
    lifespan=lifespan,
)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(tasks.router)
app.include_router(sections.router)
app.include_router(projects.router)
app.include_router(reminders.router)
app.include_router(sync.router)
app.include_router(imports.router)
