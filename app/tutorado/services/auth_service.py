import logging
from typing import Optional

from ..db.session_store import SessionStore
from ..db.store_client import StoreGateway
from ..models.entities import User
from .errors import AuthenticationRejected
from .state_cache import USERS, AppStateCache

logger = logging.getLogger(__name__)

EMERGENCY_ADMIN_ID = "ADM001"


def emergency_admin() -> User:
    """Kullanıcı listesi boş ya da erişilemez olduğunda kullanılan sentetik yönetici."""
    return User(id=EMERGENCY_ADMIN_ID, name="Administrador", role="ADMIN")


class AuthService:
    """
    İki durumlu giriş akışı: Anonim (current_user None) ya da Oturum Açık.

    Bu bir güvenlik sınırı değildir. Şifreler düz metin karşılaştırılır,
    isimler alt dize ile eşleşir ve "ADM001" ya da boş kimlik şifre kontrolü
    olmadan yöneticiye düşer. Küçük ve güvenilir kurulumlar bu düşük
    sürtünmeli davranışa dayandığı için olduğu gibi korunur.
    """

    def __init__(self, session_store: SessionStore, cache: AppStateCache, gateway: StoreGateway):
        self.session_store = session_store
        self.cache = cache
        self.gateway = gateway
        self.current_user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    async def _persist(self, user: Optional[User]) -> None:
        try:
            await self.session_store.set(user)
        except Exception as e:
            # Bu süreç için bellekteki durum geçerli kalır.
            logger.error(f"Could not persist session snapshot: {e}", exc_info=True)

    async def _authenticate(self, user: User, user_agent: str) -> User:
        self.current_user = user
        await self._persist(user)
        self.gateway.log_access(user, "login", user_agent)
        logger.info(f"User '{user.id}' ({user.role}) logged in.")
        return user

    def _match(self, identifier: str) -> Optional[User]:
        needle = identifier.lower()
        return next(
            (u for u in self.cache.users if u.id == identifier or needle in u.name.lower()),
            None,
        )

    async def login(self, identifier: str, password: str, user_agent: str = "") -> User:
        identifier = (identifier or "").strip()
        password = (password or "").strip()
        logger.info(f"Login attempt for '{identifier}'.")

        if not self.cache.users:
            logger.warning("No users loaded; entering emergency/offline mode as administrator.")
            return await self._authenticate(emergency_admin(), user_agent)

        found = self._match(identifier)

        if found is None and identifier in (EMERGENCY_ADMIN_ID, ""):
            fallback = next((u for u in self.cache.users if u.role == "ADMIN"), None)
            logger.warning(f"No match for '{identifier}'; falling back to administrator login.")
            return await self._authenticate(fallback or emergency_admin(), user_agent)

        if found is None:
            logger.warning(f"Login rejected: no user matches '{identifier}'.")
            raise AuthenticationRejected("User not found. Try ADM001.")

        if found.password and found.password != password:
            logger.warning(f"Login rejected: wrong password for '{found.id}'.")
            raise AuthenticationRejected("Incorrect password.")

        return await self._authenticate(found, user_agent)

    async def logout(self, user_agent: str = "") -> None:
        user = self.current_user
        self.current_user = None
        try:
            await self.session_store.clear()
        except Exception as e:
            logger.error(f"Could not clear session snapshot: {e}", exc_info=True)
        if user is not None:
            self.gateway.log_access(user, "logout", user_agent)
            logger.info(f"User '{user.id}' logged out.")

    async def restore(self) -> Optional[User]:
        """
        Kaydedilmiş oturumu yeni yüklenen kullanıcılarla eşleştirir. Yüklenen
        kayıt eski anlık görüntünün yerine geçer; bilinmeyen bir id yalnızca
        kaydı siler. Zaman aşımından sonra açılmış aktif bir oturum (ör. acil
        durum yöneticisi) geç gelen yükleme yüzünden kapatılmaz.
        """
        try:
            snapshot = await self.session_store.get()
        except Exception as e:
            logger.error(f"Could not read session snapshot: {e}", exc_info=True)
            return None
        if snapshot is None:
            return None

        found = self.cache.find(USERS, snapshot.id)
        if found is None:
            logger.info(f"Stored session '{snapshot.id}' is not among loaded users; clearing it.")
            await self._persist(None)
            return self.current_user

        if self.current_user is not None and self.current_user.id != found.id:
            return self.current_user
        self.current_user = found
        await self._persist(found)
        logger.info(f"Session restored for '{found.id}'.")
        return found

    async def refresh_current(self, user: User) -> None:
        """Kullanıcı kendi kaydını düzenlediğinde oturumu günceller."""
        if self.current_user is not None and self.current_user.id == user.id:
            self.current_user = user
            await self._persist(user)
