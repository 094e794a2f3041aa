"""
Yeni öğrenciler (ALU###) ve kullanıcılar (ADM###/TUT###) için okunabilir id üretimi.

Benzersizlik yalnızca bellekte yüklü id'lere göre kontrol edilir. Aynı anda
kayıt oluşturan iki oturum yine aynı id'yi seçebilir; bu durumda deponun
upsert işlemi bir kaydı diğeriyle değiştirir.
"""

from typing import Iterable, Optional

STUDENT = "STUDENT"
USER = "USER"

STUDENT_PREFIX = "ALU"
ADMIN_PREFIX = "ADM"
TUTOR_PREFIX = "TUT"


def _format(prefix: str, number: int) -> str:
    return f"{prefix}{number:03d}"


def _first_free(prefix: str, base: int, taken: set) -> str:
    offset = 0
    candidate = _format(prefix, base)
    while candidate in taken:
        offset += 1
        candidate = _format(prefix, base + offset)
    return candidate


def allocate_student_id(existing_ids: Iterable[str]) -> str:
    ids = list(existing_ids)
    return _first_free(STUDENT_PREFIX, len(ids) + 1, set(ids))


def allocate_user_id(role: str, existing_ids: Iterable[str]) -> str:
    # Sayaç tüm kullanıcılardan değil, aynı öneki taşıyanlardan sonra başlar.
    prefix = ADMIN_PREFIX if role == "ADMIN" else TUTOR_PREFIX
    ids = list(existing_ids)
    same_prefix = sum(1 for user_id in ids if user_id.startswith(prefix))
    return _first_free(prefix, same_prefix + 1, set(ids))


def allocate(kind: str, existing_ids: Iterable[str], role: Optional[str] = None) -> str:
    if kind == STUDENT:
        return allocate_student_id(existing_ids)
    if kind == USER:
        return allocate_user_id(role or "TUTOR", existing_ids)
    raise ValueError(f"Unknown entity kind for id allocation: {kind}")
