import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Créer engine SQLite pour tests AVANT d'importer l'app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer l'app
import taskboard.core.database
taskboard.core.database.engine = test_engine
taskboard.core.database.SessionLocal = TestingSessionLocal

from taskboard.core.database import Base
from taskboard.core.dependencies import get_workspace
from taskboard.main import app
from taskboard.services.offline_storage import OfflineStore
from taskboard.services.remote_store import InMemoryRemoteStore
from taskboard.services.sync_service import Connectivity
from taskboard.services.workspace import Workspace

OWNER = "user-1"


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB locale avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def remote():
    """Backend distant en mémoire"""
    return InMemoryRemoteStore()


@pytest.fixture
def offline_store():
    return OfflineStore(TestingSessionLocal)


@pytest.fixture
def connectivity():
    return Connectivity(online=True)


@pytest.fixture
def workspace(remote, offline_store, connectivity):
    """Workspace démarré, en ligne, sans données"""
    ws = Workspace(remote, offline_store, connectivity, OWNER)
    ws.start()
    yield ws
    ws.stop()


@pytest.fixture
def client(workspace):
    """Client de test FastAPI branché sur le workspace de test"""
    from fastapi.testclient import TestClient
    app.dependency_overrides[get_workspace] = lambda: workspace
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def inbox(workspace):
    """Section "main" par défaut"""
    return workspace.sections.create_section("Inbox")
