import asyncio
import logging
import time
from typing import Dict, Optional

from ..db.store_client import StoreGateway
from ..models.codec import (
    decode_attendance,
    decode_student,
    decode_student_detail,
    decode_user,
    encode_attendance,
    encode_student,
    encode_user,
)
from ..models.entities import Attendance, StudentDetail, StudentSummary, User
from .auth_service import AuthService
from .errors import PermissionDeniedError, ProtectedIdentityError, StillLoadingError, StoreUnavailableError
from .identifier_allocator import allocate_student_id, allocate_user_id
from .state_cache import ATTENDANCES, STUDENTS, USERS, AppStateCache

logger = logging.getLogger(__name__)


def new_attendance_id() -> str:
    return f"ATD{int(time.time() * 1000)}"


class DataService:
    """
    Tüm değişiklikleri yönetir: id ata (yalnızca yeni kayıtlar), kodla,
    gateway üzerinden upsert ya da sil, depoda kalan satırı çöz ve önbelleğe
    işle. Başarısız bir uzak çağrı önbelleği değiştirmez.

    Yazmalar id bazında sıraya konmaz. Aynı anda iki kayıt işlemi önbelleğe
    tamamlanma sırasıyla uygulanır; depo en son kabul ettiğini tutar.
    """

    def __init__(self, gateway: StoreGateway, cache: AppStateCache, auth: AuthService):
        self.gateway = gateway
        self.cache = cache
        self.auth = auth
        self.is_loading = False
        self.load_results: Dict[str, bool] = {}
        self._interested = True
        self._load_task: Optional[asyncio.Task] = None

    @property
    def is_offline(self) -> bool:
        """Hiç kullanıcı yüklenmedi: yalnızca acil durum girişi mümkün."""
        return not self.cache.users

    def ensure_ready(self) -> None:
        if self.is_loading:
            raise StillLoadingError("Data is still loading. Try again shortly.")

    # ===== Startup =====

    async def load_initial(self) -> Dict[str, bool]:
        """
        Üç koleksiyonu eş zamanlı çeker ve gelenleri önbelleğe uygular.
        Başarısız bir koleksiyon diğer ikisini engellemez.
        """
        users_rows, students_rows, attendance_rows = await asyncio.gather(
            self.gateway.load_users(),
            self.gateway.load_students(),
            self.gateway.load_attendances(),
            return_exceptions=True,
        )

        results = {}
        for kind, rows, decode in (
            (USERS, users_rows, decode_user),
            (STUDENTS, students_rows, decode_student),
            (ATTENDANCES, attendance_rows, decode_attendance),
        ):
            if rows is None or isinstance(rows, BaseException):
                logger.error(f"Startup load of '{kind}' failed: {rows}")
                results[kind] = False
                continue
            results[kind] = True
            if self._interested:
                self.cache.load(kind, [decode(row) for row in rows])

        self.load_results = results
        if not any(results.values()):
            logger.warning("Nothing could be loaded. Emergency login (ADM001) is available.")
        return results

    async def _load_and_restore(self) -> None:
        await self.load_initial()
        if self._interested:
            await self.auth.restore()

    def _log_late_failure(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Startup load failed after the timeout.", exc_info=task.exception())

    def start(self, timeout: float) -> asyncio.Task:
        """bootstrap'ı arka planda başlatır; is_loading dönüşten önce ayarlanır."""
        self.is_loading = True
        return asyncio.create_task(self.bootstrap(timeout))

    async def bootstrap(self, timeout: float) -> None:
        """
        Başlangıç yüklemesini tek bir zaman aşımıyla çalıştırır. Süre dolunca
        is_loading kapanır ve giriş mümkün olur; yükleme devam eder ve sonucu
        geldiğinde yine uygulanır.
        """
        self.is_loading = True
        self._load_task = asyncio.create_task(self._load_and_restore())
        try:
            await asyncio.wait_for(asyncio.shield(self._load_task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Remote store took longer than {timeout}s. Allowing local login.")
            self._load_task.add_done_callback(self._log_late_failure)
        except Exception as e:
            logger.error(f"Error while loading data: {e}", exc_info=True)
        finally:
            self.is_loading = False

    def detach(self) -> None:
        """Hâlâ devam eden isteklerin sonuçlarını artık uygulamaz."""
        self._interested = False

    async def close(self) -> None:
        self.detach()
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
            await asyncio.gather(self._load_task, return_exceptions=True)
        await self.gateway.wait_for_background_tasks()

    # ===== Detail fetches =====

    async def get_student_detail(self, student_id: str) -> Optional[StudentDetail]:
        row = await self.gateway.students.get_by_id(student_id)
        if row is None:
            return None
        student = decode_student_detail(row)
        self.cache.replace_entry(STUDENTS, student)
        return student

    async def get_user_detail(self, user_id: str) -> Optional[User]:
        row = await self.gateway.users.get_by_id(user_id)
        if row is None:
            return None
        user = decode_user(row)
        self.cache.replace_entry(USERS, user)
        return user

    # ===== Students =====

    async def save_student(self, student: StudentSummary) -> StudentSummary:
        if not student.id:
            student = student.model_copy(update={"id": allocate_student_id(self.cache.ids(STUDENTS))})
        stored = await self.gateway.students.upsert(encode_student(student))
        if stored is None:
            raise StoreUnavailableError(f"Student '{student.id}' could not be saved.")
        saved = decode_student(stored)
        if self._interested:
            self.cache.merge_upsert(STUDENTS, saved)
        logger.info(f"Student '{saved.id}' saved.")
        return saved

    async def delete_student(self, student_id: str) -> None:
        if not await self.gateway.students.delete_by_id(student_id):
            raise StoreUnavailableError(f"Student '{student_id}' could not be deleted.")
        if self._interested:
            self.cache.merge_delete(STUDENTS, student_id)
        logger.info(f"Student '{student_id}' deleted.")

    # ===== Users =====

    async def save_user(self, user: User) -> User:
        if not user.id:
            user = user.model_copy(update={"id": allocate_user_id(user.role, self.cache.ids(USERS))})
        stored = await self.gateway.users.upsert(encode_user(user))
        if stored is None:
            raise StoreUnavailableError(f"User '{user.id}' could not be saved.")
        saved = decode_user(stored)
        if self._interested:
            self.cache.merge_upsert(USERS, saved)
        await self.auth.refresh_current(saved)
        logger.info(f"User '{saved.id}' saved.")
        return saved

    async def delete_user(self, user_id: str, acting_user: User) -> None:
        if acting_user.id == user_id:
            raise ProtectedIdentityError("You cannot delete your own user.")
        if not await self.gateway.users.delete_by_id(user_id):
            raise StoreUnavailableError(f"User '{user_id}' could not be deleted.")
        if self._interested:
            self.cache.merge_delete(USERS, user_id)
        logger.info(f"User '{user_id}' deleted by '{acting_user.id}'.")

    # ===== Attendances =====

    @staticmethod
    def can_edit_attendance(attendance: Attendance, user: User) -> bool:
        return user.role == "ADMIN" or attendance.tutor_id == user.id

    def _ensure_can_edit(self, attendance: Attendance, user: User) -> None:
        if not self.can_edit_attendance(attendance, user):
            logger.warning(f"User '{user.id}' tried to change attendance '{attendance.id}' of '{attendance.tutor_id}'.")
            raise PermissionDeniedError("Only the tutor who logged this attendance or an administrator can change it.")

    async def _find_attendance(self, attendance_id: str) -> Optional[Attendance]:
        """
        Önce önbelleğe, yoksa uzak depoya bakar. Başlangıç yüklemesi başarısız
        olduysa ya da kayıt başka bir istemci tarafından eklendiyse de sahiplik
        kontrolü bu kayıt üzerinden yapılır.
        """
        cached = self.cache.find(ATTENDANCES, attendance_id)
        if cached is not None:
            return cached
        row = await self.gateway.attendances.get_by_id(attendance_id)
        return decode_attendance(row) if row is not None else None

    async def _build_attendance(self, draft: Attendance, acting_user: User) -> Attendance:
        student = self.cache.find(STUDENTS, draft.student_id)
        original = await self._find_attendance(draft.id) if draft.id else None

        if original is not None:
            # Tutor bilgisi kayıttan sonra değişmez; orijinal kayıttan alınır.
            self._ensure_can_edit(original, acting_user)
            return original.model_copy(update={
                "student_id": draft.student_id,
                "student_name": student.name if student else original.student_name,
                "date": draft.date,
                "dimension": draft.dimension,
                "subject": draft.subject,
                "notes": draft.notes or "",
            })

        return Attendance(
            # Yeni kayıtlar her zaman yeni bir id alır; istemcinin gönderdiği id kullanılmaz.
            id=new_attendance_id(),
            student_id=draft.student_id,
            student_name=student.name if student else "Desconhecido",
            tutor_id=acting_user.id,
            tutor_name=acting_user.name,
            date=draft.date,
            dimension=draft.dimension,
            subject=draft.subject,
            notes=draft.notes or "",
        )

    async def save_attendance(self, draft: Attendance, acting_user: User) -> Attendance:
        record = await self._build_attendance(draft, acting_user)
        stored = await self.gateway.attendances.upsert(encode_attendance(record))
        if stored is None:
            raise StoreUnavailableError(f"Attendance '{record.id}' could not be saved.")
        saved = decode_attendance(stored)
        if self._interested:
            self.cache.merge_upsert(ATTENDANCES, saved)
        logger.info(f"Attendance '{saved.id}' saved by '{acting_user.id}'.")
        return saved

    async def delete_attendance(self, attendance_id: str, acting_user: User) -> None:
        existing = await self._find_attendance(attendance_id)
        if existing is None:
            logger.info(f"Attendance '{attendance_id}' not found; nothing to delete.")
            return
        self._ensure_can_edit(existing, acting_user)
        if not await self.gateway.attendances.delete_by_id(attendance_id):
            raise StoreUnavailableError(f"Attendance '{attendance_id}' could not be deleted.")
        if self._interested:
            self.cache.merge_delete(ATTENDANCES, attendance_id)
        logger.info(f"Attendance '{attendance_id}' deleted by '{acting_user.id}'.")
