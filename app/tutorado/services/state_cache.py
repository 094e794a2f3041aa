import logging
from typing import Dict, List, Optional

from ..models.entities import EntityModel

logger = logging.getLogger(__name__)

USERS = "users"
STUDENTS = "students"
ATTENDANCES = "attendances"

KINDS = (USERS, STUDENTS, ATTENDANCES)


class AppStateCache:
    """
    Üç koleksiyonun bellekteki kopyası. Başlangıçta bir kez doldurulur, sonra
    her başarılı yazmayla güncellenir; hiçbir zaman toptan yeniden çekilmez.
    Atendimentolar en yeniden eskiye, diğer listeler yükleme sırasıyla tutulur.
    """

    def __init__(self):
        self._collections: Dict[str, List[EntityModel]] = {kind: [] for kind in KINDS}

    @property
    def users(self) -> List[EntityModel]:
        return self._collections[USERS]

    @property
    def students(self) -> List[EntityModel]:
        return self._collections[STUDENTS]

    @property
    def attendances(self) -> List[EntityModel]:
        return self._collections[ATTENDANCES]

    def _collection(self, kind: str) -> List[EntityModel]:
        try:
            return self._collections[kind]
        except KeyError:
            raise ValueError(f"Unknown collection: {kind}") from None

    def load(self, kind: str, entities: List[EntityModel]) -> None:
        """Bir koleksiyonun başlangıçta doldurulması."""
        self._collection(kind)[:] = list(entities)

    def find(self, kind: str, entity_id: str) -> Optional[EntityModel]:
        return next((e for e in self._collection(kind) if e.id == entity_id), None)

    def ids(self, kind: str) -> List[str]:
        return [e.id for e in self._collection(kind)]

    def _index_of(self, kind: str, entity_id: str) -> Optional[int]:
        for index, entity in enumerate(self._collection(kind)):
            if entity.id == entity_id:
                return index
        return None

    def merge_upsert(self, kind: str, entity: EntityModel) -> None:
        """id biliniyorsa yerinde değiştirir, yoksa ekler."""
        items = self._collection(kind)
        index = self._index_of(kind, entity.id)
        if index is not None:
            items[index] = entity
        elif kind == ATTENDANCES:
            items.insert(0, entity)
        else:
            items.append(entity)

    def merge_delete(self, kind: str, entity_id: str) -> None:
        items = self._collection(kind)
        items[:] = [e for e in items if e.id != entity_id]

    def replace_entry(self, kind: str, entity: EntityModel) -> bool:
        """
        Önbellekteki bir kaydı yeni çekilen tam kayıtla değiştirir. id
        önbellekte yoksa False döner ve liste değişmez.
        """
        index = self._index_of(kind, entity.id)
        if index is None:
            logger.info(f"'{entity.id}' is not cached in '{kind}'; detail not merged.")
            return False
        self._collection(kind)[index] = entity
        return True

    @property
    def is_empty(self) -> bool:
        return not any(self._collections.values())
