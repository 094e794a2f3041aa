import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

import httpx

from ..models.codec import (
    ATTENDANCE_COLUMNS,
    STUDENT_SUMMARY_COLUMNS,
    USER_COLUMNS,
    WireRecord,
)
from ..models.entities import AccessLogEntry, User

logger = logging.getLogger(__name__)

USER_AGENT_MAX_LENGTH = 250


def create_http_client(base_url: str, api_key: str, timeout: float = 30.0) -> httpx.AsyncClient:
    """
    Uzak depo (Supabase REST) için paylaşımlı bir httpx istemcisi oluşturur.
    Ayarlar eksikse istemci yine oluşturulur; RemoteStoreClient ağa hiç çıkmaz.
    """
    headers = {}
    if api_key:
        headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}
    rest_url = f"{base_url.rstrip('/')}/rest/v1" if base_url else ""
    return httpx.AsyncClient(
        base_url=rest_url,
        headers=headers,
        timeout=timeout,
        limits=httpx.Limits(max_keepalive_connections=5, max_connections=10)
    )


class StoreNotConfiguredError(Exception):
    """Temel URL ya da erişim anahtarı eksik olduğunda içeride fırlatılır."""
    pass


class RemoteStoreClient:
    """
    Tüm uzak tablo isteklerini yöneten ince HTTP katmanı.
    Hata yönetimi burada değil, TableGateway içinde yapılır.
    """
    def __init__(self, http_client: httpx.AsyncClient, configured: bool = True):
        self._client = http_client
        self._configured = configured

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        if not self._configured:
            raise StoreNotConfiguredError("Remote store URL or access key is not configured.")
        headers = {"Prefer": prefer} if prefer else None
        response = await self._client.request(method, f"/{table}", params=params, json=json, headers=headers)
        response.raise_for_status()
        return response


class TableGateway:
    """
    Tek bir uzak tablo için okuma/upsert/silme operasyonları.
    Hiçbir hata çağırana fırlatılmaz: başarısızlık None veya False olarak döner.
    """
    def __init__(self, client: RemoteStoreClient, table: str):
        self._client = client
        self.table = table

    async def load_all(self, columns: str, order: str = "id.asc") -> Optional[List[WireRecord]]:
        """Verilen kolon projeksiyonu ile tablonun tamamını getirir."""
        try:
            response = await self._client.request("GET", self.table, params={"select": columns, "order": order})
            rows = response.json()
            logger.info(f"Loaded {len(rows)} rows from '{self.table}'.")
            return rows
        except (httpx.HTTPError, StoreNotConfiguredError, ValueError) as e:
            logger.error(f"Failed to load '{self.table}': {e}")
            return None

    async def get_by_id(self, record_id: str) -> Optional[WireRecord]:
        """Tek bir satırı tüm kolonlarıyla getirir. Bulunamazsa None döner."""
        try:
            response = await self._client.request(
                "GET", self.table, params={"select": "*", "id": f"eq.{record_id}"}
            )
            rows = response.json()
        except (httpx.HTTPError, StoreNotConfiguredError, ValueError) as e:
            logger.error(f"Failed to fetch '{record_id}' from '{self.table}': {e}")
            return None
        if not rows:
            logger.info(f"No row '{record_id}' in '{self.table}'.")
            return None
        return rows[0]

    async def upsert(self, row: WireRecord) -> Optional[WireRecord]:
        """Satırı id çakışma anahtarıyla ekler ya da tamamen değiştirir."""
        try:
            response = await self._client.request(
                "POST",
                self.table,
                params={"on_conflict": "id"},
                json=row,
                prefer="resolution=merge-duplicates,return=representation",
            )
            stored = response.json()
        except (httpx.HTTPError, StoreNotConfiguredError, ValueError) as e:
            logger.error(f"Failed to save '{row.get('id')}' into '{self.table}': {e}")
            return None
        if isinstance(stored, list):
            if not stored:
                logger.error(f"Store returned no representation for '{row.get('id')}' in '{self.table}'.")
                return None
            stored = stored[0]
        return stored

    async def delete_by_id(self, record_id: str) -> bool:
        try:
            await self._client.request("DELETE", self.table, params={"id": f"eq.{record_id}"})
            return True
        except (httpx.HTTPError, StoreNotConfiguredError) as e:
            logger.error(f"Failed to delete '{record_id}' from '{self.table}': {e}")
            return False


class StoreGateway:
    """
    users, students ve attendances tabloları ile yalnızca yazılabilir
    access_logs tablosunu bir arada tutar.
    """
    def __init__(self, client: RemoteStoreClient):
        self._client = client
        self.users = TableGateway(client, "users")
        self.students = TableGateway(client, "students")
        self.attendances = TableGateway(client, "attendances")
        self._background_tasks: Set[asyncio.Task] = set()

    @property
    def is_configured(self) -> bool:
        return self._client.is_configured

    async def load_users(self) -> Optional[List[WireRecord]]:
        return await self.users.load_all(USER_COLUMNS, order="id.asc")

    async def load_students(self) -> Optional[List[WireRecord]]:
        # Kısaltılmış projeksiyon: panel ve listeler yalnızca bu beş kolona ihtiyaç duyar.
        return await self.students.load_all(STUDENT_SUMMARY_COLUMNS, order="id.asc")

    async def load_attendances(self) -> Optional[List[WireRecord]]:
        return await self.attendances.load_all(ATTENDANCE_COLUMNS, order="date.desc")

    def log_access(self, user: User, action: str, user_agent: str = "") -> None:
        """
        Erişim kaydını arka planda yazar. Çağıranı asla bekletmez ve
        hata durumunda sadece uyarı loglar.
        """
        entry = AccessLogEntry(
            user_id=user.id,
            user_name=user.name,
            role=user.role,
            action=action,
            logged_at=datetime.now(timezone.utc).isoformat(),
            user_agent=(user_agent or "")[:USER_AGENT_MAX_LENGTH],
        )
        task = asyncio.create_task(self._insert_access_log(entry))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _insert_access_log(self, entry: AccessLogEntry) -> None:
        try:
            await self._client.request("POST", "access_logs", json=entry.model_dump(), prefer="return=minimal")
        except Exception as e:
            logger.warning(f"Failed to write access log for '{entry.user_id}': {e}")

    async def wait_for_background_tasks(self) -> None:
        """Bekleyen erişim kaydı yazımlarının bitmesini bekler (kapanış ve testler için)."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
