import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from app.tutorado.main import app
from app.tutorado.api.dependencies import get_data_service
from app.tutorado.db.session_store import InMemorySessionStore
from app.tutorado.services.auth_service import AuthService
from app.tutorado.services.data_service import DataService
from app.tutorado.services.state_cache import ATTENDANCES, STUDENTS, USERS, AppStateCache


@pytest.fixture
def gateway() -> MagicMock:
    gateway = MagicMock()
    gateway.wait_for_background_tasks = AsyncMock()
    for table in (gateway.users, gateway.students, gateway.attendances):
        table.upsert = AsyncMock(side_effect=lambda row: dict(row))
        table.delete_by_id = AsyncMock(return_value=True)
        table.get_by_id = AsyncMock(return_value=None)
    return gateway


@pytest.fixture
def service(gateway, admin_user, tutor_user, other_tutor, sample_students, sample_attendance) -> DataService:
    cache = AppStateCache()
    cache.load(USERS, [admin_user, tutor_user, other_tutor])
    cache.load(STUDENTS, sample_students)
    cache.load(ATTENDANCES, [sample_attendance])
    service = DataService(gateway, cache, AuthService(InMemorySessionStore(), cache, gateway))
    service.load_results = {USERS: True, STUDENTS: True, ATTENDANCES: True}
    return service


@pytest.fixture
def client(service):
    """
    Lifespan çalıştırılmadan, hazır bir DataService ile TestClient döndürür.
    Uzak depoya hiçbir istek gitmez.
    """
    app.state.data_service = service
    app.state.missing_config = []
    app.dependency_overrides[get_data_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    """Verilen kimlikle oturum açan bir yardımcı fonksiyon döndürür."""
    def _login(identifier: str, password: str = "") -> dict:
        response = client.post("/api/v1/auth/login", json={"identifier": identifier, "password": password})
        assert response.status_code == 200, response.text
        return response.json()
    return _login
