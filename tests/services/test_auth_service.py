import pytest
from unittest.mock import AsyncMock, MagicMock

from app.tutorado.db.session_store import InMemorySessionStore
from app.tutorado.models.entities import User
from app.tutorado.services.auth_service import EMERGENCY_ADMIN_ID, AuthService
from app.tutorado.services.errors import AuthenticationRejected
from app.tutorado.services.state_cache import USERS, AppStateCache

# --- Test Fikstürleri ---

@pytest.fixture
def cache(admin_user, tutor_user, other_tutor) -> AppStateCache:
    cache = AppStateCache()
    cache.load(USERS, [admin_user, tutor_user, other_tutor])
    return cache


@pytest.fixture
def gateway() -> MagicMock:
    """log_access senkron bir fire-and-forget çağrısıdır."""
    return MagicMock()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def auth(session_store, cache, gateway) -> AuthService:
    return AuthService(session_store=session_store, cache=cache, gateway=gateway)


# --- Test Senaryoları ---

@pytest.mark.asyncio
class TestLogin:

    async def test_empty_directory_enters_emergency_admin(self, session_store, gateway):
        auth = AuthService(session_store=session_store, cache=AppStateCache(), gateway=gateway)
        user = await auth.login("anyone", "whatever")

        assert user.id == EMERGENCY_ADMIN_ID
        assert user.name == "Administrador"
        assert user.role == "ADMIN"
        assert (await session_store.get()).id == EMERGENCY_ADMIN_ID

    async def test_login_by_exact_id(self, auth, gateway):
        user = await auth.login("TUT002", "")
        assert user.id == "TUT002"
        assert auth.is_authenticated
        gateway.log_access.assert_called_once_with(user, "login", "")

    async def test_login_by_case_insensitive_name_fragment(self, auth):
        user = await auth.login("  paula ", "")
        assert user.id == "TUT002"

    async def test_password_is_checked_when_set(self, auth, gateway):
        with pytest.raises(AuthenticationRejected, match="Incorrect password"):
            await auth.login("TUT001", "wrong")
        assert auth.current_user is None
        gateway.log_access.assert_not_called()

        user = await auth.login("TUT001", " 1234 ")
        assert user.id == "TUT001"

    async def test_unknown_identifier_is_rejected(self, auth):
        with pytest.raises(AuthenticationRejected, match="User not found"):
            await auth.login("Fulano", "")
        assert not auth.is_authenticated

    async def test_adm001_without_match_falls_back_to_first_admin(self, session_store, gateway, tutor_user):
        cache = AppStateCache()
        boss = User(id="ADM007", name="Diretora", role="ADMIN", password="secret")
        cache.load(USERS, [tutor_user, boss])
        auth = AuthService(session_store=session_store, cache=cache, gateway=gateway)

        user = await auth.login("ADM001", "")
        assert user.id == "ADM007"

    async def test_adm001_without_any_admin_uses_synthetic_admin(self, session_store, gateway, tutor_user):
        cache = AppStateCache()
        cache.load(USERS, [User(id="TUT050", name="Zeca", role="TUTOR")])
        auth = AuthService(session_store=session_store, cache=cache, gateway=gateway)

        user = await auth.login("ADM001", "")
        assert user.id == EMERGENCY_ADMIN_ID
        assert user.role == "ADMIN"

    async def test_empty_credentials_log_in_the_only_passwordless_admin(self, session_store, gateway, admin_user):
        """
        Senaryo: Tek kullanıcı ADM001 (şifresiz) yüklüyken login("", "").
        Beklenti: ADM001 olarak oturum açılır ve oturum kaydı yazılır.
        """
        cache = AppStateCache()
        cache.load(USERS, [admin_user])
        auth = AuthService(session_store=session_store, cache=cache, gateway=gateway)

        user = await auth.login("", "")
        assert user.id == "ADM001"
        assert (await session_store.get()) == admin_user

    async def test_session_store_failure_does_not_block_login(self, cache, gateway):
        broken_store = AsyncMock()
        broken_store.set.side_effect = ConnectionError("redis down")
        auth = AuthService(session_store=broken_store, cache=cache, gateway=gateway)

        user = await auth.login("TUT002", "")
        assert auth.current_user == user


@pytest.mark.asyncio
class TestSessionLifecycle:

    async def test_logout_clears_state_and_logs_access(self, auth, session_store, gateway):
        user = await auth.login("TUT002", "")
        await auth.logout(user_agent="pytest")

        assert auth.current_user is None
        assert await session_store.get() is None
        gateway.log_access.assert_called_with(user, "logout", "pytest")

    async def test_restore_prefers_the_freshly_loaded_record(self, cache, gateway):
        stale = User(id="TUT001", name="Nome Antigo", role="TUTOR")
        store = InMemorySessionStore(stale)
        auth = AuthService(session_store=store, cache=cache, gateway=gateway)

        restored = await auth.restore()
        assert restored.name == "Carlos Tutor Silva"
        assert auth.current_user.name == "Carlos Tutor Silva"
        assert (await store.get()).name == "Carlos Tutor Silva"

    async def test_restore_of_unknown_id_clears_the_snapshot(self, cache, gateway):
        store = InMemorySessionStore(User(id="TUT404", name="Removido", role="TUTOR"))
        auth = AuthService(session_store=store, cache=cache, gateway=gateway)

        assert await auth.restore() is None
        assert auth.current_user is None
        assert await store.get() is None

    async def test_restore_without_snapshot_stays_anonymous(self, auth):
        assert await auth.restore() is None
        assert not auth.is_authenticated

    async def test_refresh_current_only_touches_the_logged_in_user(self, auth, session_store):
        await auth.login("TUT002", "")
        await auth.refresh_current(User(id="TUT001", name="Outra Pessoa", role="TUTOR"))
        assert auth.current_user.id == "TUT002"

        renamed = User(id="TUT002", name="Ana Paula S.", role="TUTOR")
        await auth.refresh_current(renamed)
        assert auth.current_user.name == "Ana Paula S."
        assert (await session_store.get()).name == "Ana Paula S."

    async def test_restore_with_unknown_snapshot_keeps_an_active_session(self, gateway, tutor_user):
        store = InMemorySessionStore()
        late_cache = AppStateCache()
        auth = AuthService(session_store=store, cache=late_cache, gateway=gateway)
        await auth.login("", "")
        late_cache.load(USERS, [tutor_user])

        restored = await auth.restore()

        assert restored.id == EMERGENCY_ADMIN_ID
        assert auth.current_user.id == EMERGENCY_ADMIN_ID
        assert await store.get() is None
