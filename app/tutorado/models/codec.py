# app/tutorado/models/codec.py
"""
Senkronize edilen üç koleksiyon için depo satırı <-> varlık dönüşümü.

Her varlık türü bir kez, FieldSpec satırlarından oluşan bir tabloyla tanımlanır.
decode_* ve encode_* yalnızca bu tabloyu kullanır; böylece her alan için
decode(encode(e)) == e, çağrı noktasında ayrıca varsayılan vermeden sağlanır.

Depodaki değer null ya da eksikse decode sırasında kullanılan varsayılanlar:
    metin   -> ""
    bayrak  -> False
    liste   -> []
    ekler   -> None (geri kodlanırken null gönderilir, atlanmaz)
"""

from typing import Any, Callable, Dict, List, NamedTuple, Optional, Type, Union

from .entities import Attendance, EntityModel, StudentDetail, StudentSummary, User

WireRecord = Dict[str, Any]


def _text() -> str:
    return ""


def _flag() -> bool:
    return False


def _items() -> list:
    return []


def _absent() -> None:
    return None


def _iso_date(value: Any) -> str:
    return str(value)[:10] if value else ""


class FieldSpec(NamedTuple):
    attr: str
    wire: str
    default: Callable[[], Any]
    normalize: Optional[Callable[[Any], Any]] = None


USER_FIELDS: List[FieldSpec] = [
    FieldSpec("id", "id", _text),
    FieldSpec("name", "name", _text),
    FieldSpec("role", "role", lambda: "TUTOR"),
    FieldSpec("photo", "photo", _absent),
    FieldSpec("password", "password", _absent),
]

STUDENT_SUMMARY_FIELDS: List[FieldSpec] = [
    FieldSpec("id", "id", _text),
    FieldSpec("tutor_id", "tutor_id", _text),
    FieldSpec("name", "name", _text),
    FieldSpec("series", "series", _text),
    FieldSpec("birth_date", "birth_date", _text),
]

STUDENT_DETAIL_FIELDS: List[FieldSpec] = STUDENT_SUMMARY_FIELDS + [
    FieldSpec("phone_student", "phone_student", _text),
    FieldSpec("phone_guardian", "phone_guardian", _text),
    FieldSpec("schools_attended", "schools_attended", _text),
    FieldSpec("photo", "photo", _absent),
    FieldSpec("father_name", "father_name", _text),
    FieldSpec("father_age", "father_age", _text),
    FieldSpec("father_job", "father_job", _text),
    FieldSpec("mother_name", "mother_name", _text),
    FieldSpec("mother_age", "mother_age", _text),
    FieldSpec("mother_job", "mother_job", _text),
    FieldSpec("siblings", "siblings", _text),
    FieldSpec("living_arrangement", "living_arrangement", _text),
    FieldSpec("has_device", "has_device", _items),
    FieldSpec("has_internet", "has_internet", _flag),
    FieldSpec("has_pet", "has_pet", _flag),
    FieldSpec("pet_details", "pet_details", _absent),
    FieldSpec("courses_external", "courses_external", _flag),
    FieldSpec("course_details", "course_details", _absent),
    FieldSpec("study_at_home", "study_at_home", _flag),
    FieldSpec("study_time", "study_time", _absent),
    FieldSpec("likes_reading", "likes_reading", _flag),
    FieldSpec("book_type", "book_type", _absent),
    FieldSpec("sports", "sports", _flag),
    FieldSpec("sport_details", "sport_details", _absent),
    FieldSpec("leisure_activity", "leisure_activity", _text),
    FieldSpec("dislikes_activity", "dislikes_activity", _text),
    FieldSpec("sleep_time", "sleep_time", _text),
    FieldSpec("wake_time", "wake_time", _text),
    FieldSpec("life_project", "life_project", _text),
    FieldSpec("roles", "roles", _items),
    FieldSpec("performance_doc", "performance_doc", _absent),
    FieldSpec("performance_doc_type", "performance_doc_type", _absent),
]

ATTENDANCE_FIELDS: List[FieldSpec] = [
    FieldSpec("id", "id", _text),
    FieldSpec("student_id", "student_id", _text),
    FieldSpec("student_name", "student_name", _text),
    FieldSpec("tutor_id", "tutor_id", _text),
    FieldSpec("tutor_name", "tutor_name", _text),
    FieldSpec("date", "date", _text, _iso_date),
    FieldSpec("dimension", "dimension", lambda: "Acadêmica"),
    FieldSpec("subject", "subject", _text),
    FieldSpec("notes", "notes", _text),
]

# Depodan istenen kolon projeksiyonları.
USER_COLUMNS = ",".join(spec.wire for spec in USER_FIELDS)
STUDENT_SUMMARY_COLUMNS = ",".join(spec.wire for spec in STUDENT_SUMMARY_FIELDS)
ATTENDANCE_COLUMNS = ",".join(spec.wire for spec in ATTENDANCE_FIELDS)

_SUMMARY_WIRE_NAMES = {spec.wire for spec in STUDENT_SUMMARY_FIELDS}


def _decode(model: Type[EntityModel], fields: List[FieldSpec], row: WireRecord) -> EntityModel:
    values = {}
    for spec in fields:
        value = row.get(spec.wire)
        if value is None:
            value = spec.default()
        elif spec.normalize is not None:
            value = spec.normalize(value)
        elif isinstance(value, list):
            value = list(value)
        values[spec.attr] = value
    # Sadece şekil dönüşümü; doğrulama istek katmanında yapılır.
    return model.model_construct(**values)


def _encode(entity: EntityModel, fields: List[FieldSpec]) -> WireRecord:
    row = {}
    for spec in fields:
        value = getattr(entity, spec.attr, None)
        row[spec.wire] = list(value) if isinstance(value, list) else value
    return row


def decode_user(row: WireRecord) -> User:
    return _decode(User, USER_FIELDS, row)


def encode_user(user: User) -> WireRecord:
    return _encode(user, USER_FIELDS)


def decode_student(row: WireRecord) -> Union[StudentSummary, StudentDetail]:
    """
    Öğrenci satırını çözer. Kısaltılmış projeksiyonun dışında kolon taşıyan
    satırlar StudentDetail, diğerleri StudentSummary olur.
    """
    if any(key not in _SUMMARY_WIRE_NAMES for key in row):
        return decode_student_detail(row)
    return _decode(StudentSummary, STUDENT_SUMMARY_FIELDS, row)


def decode_student_detail(row: WireRecord) -> StudentDetail:
    return _decode(StudentDetail, STUDENT_DETAIL_FIELDS, row)


def encode_student(student: StudentSummary) -> WireRecord:
    if isinstance(student, StudentDetail):
        return _encode(student, STUDENT_DETAIL_FIELDS)
    return _encode(student, STUDENT_SUMMARY_FIELDS)


def decode_attendance(row: WireRecord) -> Attendance:
    return _decode(Attendance, ATTENDANCE_FIELDS, row)


def encode_attendance(attendance: Attendance) -> WireRecord:
    return _encode(attendance, ATTENDANCE_FIELDS)
