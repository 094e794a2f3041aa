import logging
from typing import Optional, Protocol

import redis.asyncio as redis
from pydantic import ValidationError

from ..models.entities import User

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """
    Kaydedilmiş "oturum açmış kullanıcı" kaydı. Süresi, imzası ya da iptal
    listesi olmayan düz bir User anlık görüntüsü; ona güvenmek istemciye güvenmektir.
    """
    async def get(self) -> Optional[User]: ...

    async def set(self, user: Optional[User]) -> None: ...

    async def clear(self) -> None: ...


class RedisSessionStore:
    """
    Oturum kaydını tek bir Redis anahtarında JSON olarak saklar. TTL yoktur.
    """

    def __init__(self, pool: redis.ConnectionPool, key: str):
        self._redis = redis.Redis(connection_pool=pool, decode_responses=True)
        self._key = key

    async def get(self) -> Optional[User]:
        user_json = await self._redis.get(self._key)
        if not user_json:
            return None
        try:
            return User.model_validate_json(user_json)
        except ValidationError:
            logger.warning(f"Stored session under '{self._key}' is unreadable; discarding it.")
            await self.clear()
            return None

    async def set(self, user: Optional[User]) -> None:
        if user is None:
            await self.clear()
            return
        await self._redis.set(self._key, user.model_dump_json())

    async def clear(self) -> None:
        await self._redis.delete(self._key)

    async def aclose(self) -> None:
        await self._redis.aclose()


class InMemorySessionStore:
    """Süreç içi oturum deposu. Redis yapılandırılmadığında ve testlerde kullanılır."""

    def __init__(self, user: Optional[User] = None):
        self._snapshot: Optional[str] = user.model_dump_json() if user else None

    async def get(self) -> Optional[User]:
        if self._snapshot is None:
            return None
        try:
            return User.model_validate_json(self._snapshot)
        except ValidationError:
            logger.warning("In-memory session snapshot is unreadable; discarding it.")
            self._snapshot = None
            return None

    async def set(self, user: Optional[User]) -> None:
        self._snapshot = user.model_dump_json() if user else None

    async def clear(self) -> None:
        self._snapshot = None

    async def aclose(self) -> None:
        return None
