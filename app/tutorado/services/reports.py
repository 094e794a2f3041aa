"""
Önbellekteki koleksiyonlar üzerinde salt okunur görünümler: filtreler,
panel istatistikleri ve CSV / düz metin dışa aktarımları.
"""

import unicodedata
from collections import OrderedDict
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..models.entities import Attendance, StudentSummary, User

UNASSIGNED_TUTOR = "Não atribuído"
OTHERS_GROUP = "OUTROS"
TOP_STUDENTS_LIMIT = 20

STUDENT_CSV_HEADERS = ["ID", "Nome", "Série", "Tutor ID", "Nascimento"]
ATTENDANCE_SEPARATOR = "-----------------------------------"


def _fold(text: str) -> str:
    """Küçük harfe çevirir ve aksanları siler; 'João' ile 'joao' eşleşir."""
    decomposed = unicodedata.normalize("NFD", (text or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def tutor_name(tutor_id: str, tutors: Sequence[User]) -> str:
    tutor = next((t for t in tutors if t.id == tutor_id), None)
    return tutor.name if tutor else UNASSIGNED_TUTOR


def filter_students(students: Sequence[StudentSummary], search: str = "", series: Optional[str] = None) -> List[StudentSummary]:
    term = (search or "").lower()
    result = []
    for student in students:
        if term and term not in student.name.lower() and term not in student.id.lower():
            continue
        if series and series != "Todas" and series not in student.series:
            continue
        result.append(student)
    return result


def filter_attendances(
    attendances: Sequence[Attendance],
    students: Sequence[StudentSummary],
    date_start: Optional[str] = None,
    date_end: Optional[str] = None,
    student_name: Optional[str] = None,
) -> List[Attendance]:
    """
    YYYY-MM-DD biçiminde kapsayıcı tarih aralığı ve aksandan bağımsız isim
    eşleşmesi. İsim, öğrenci kaydı hâlâ varsa oradan, yoksa kayıttaki
    anlık görüntüden alınır. En yeni kayıt önce gelir.
    """
    names = {s.id: s.name for s in students}
    term = _fold(student_name) if student_name else ""
    result = []
    for attendance in attendances:
        row_date = (attendance.date or "")[:10]
        if date_start and row_date < date_start:
            continue
        if date_end and row_date > date_end:
            continue
        if term:
            resolved = names.get(attendance.student_id, attendance.student_name or "")
            if term not in _fold(resolved):
                continue
        result.append(attendance)
    return sorted(result, key=lambda a: a.date or "", reverse=True)


def students_csv(students: Sequence[StudentSummary]) -> str:
    # Değerler olduğu gibi birleştirilir; içerideki virgül kolonları kaydırır.
    lines = [",".join(STUDENT_CSV_HEADERS)]
    for s in students:
        lines.append(",".join([s.id, s.name, s.series, s.tutor_id, s.birth_date]))
    return "\n".join(lines)


def attendances_txt(attendances: Sequence[Attendance]) -> str:
    blocks = []
    for a in attendances:
        blocks.append(
            f"DATA: {a.date}\n"
            f"ALUNO: {a.student_name} ({a.student_id})\n"
            f"TUTOR: {a.tutor_name}\n"
            f"DIMENSÃO: {a.dimension}\n"
            f"ASSUNTO: {a.subject}\n"
            f"OBS: {a.notes}\n"
            f"{ATTENDANCE_SEPARATOR}\n"
        )
    return "".join(blocks)


def _birth_month(birth_date: str) -> Optional[int]:
    try:
        return date.fromisoformat((birth_date or "")[:10]).month
    except ValueError:
        return None


def dashboard_stats(
    students: Sequence[StudentSummary],
    users: Sequence[User],
    attendances: Sequence[Attendance],
    today: Optional[date] = None,
) -> Dict[str, object]:
    today = today or date.today()

    by_tutor = []
    for user in users:
        count = sum(1 for a in attendances if a.tutor_id == user.id)
        if count:
            # Sadece ad ve ilk soyad
            by_tutor.append({"tutor_id": user.id, "name": " ".join(user.name.split(" ")[:2]), "count": count})

    by_dimension = {}
    for a in attendances:
        by_dimension[a.dimension] = by_dimension.get(a.dimension, 0) + 1

    counts = {s.id: 0 for s in students}
    for a in attendances:
        if a.student_id in counts:
            counts[a.student_id] += 1
    ranked = sorted(students, key=lambda s: counts[s.id], reverse=True)[:TOP_STUDENTS_LIMIT]

    return {
        "total_students": len(students),
        "total_tutors": sum(1 for u in users if u.role == "TUTOR"),
        "total_attendances": len(attendances),
        "attendances_by_tutor": by_tutor,
        "attendances_by_dimension": by_dimension,
        "top_students": [{"id": s.id, "name": s.name, "attendance_count": counts[s.id]} for s in ranked],
        "birthdays_this_month": [
            {"id": s.id, "name": s.name, "birth_date": s.birth_date}
            for s in students if _birth_month(s.birth_date) == today.month
        ],
    }


def students_by_tutor(students: Sequence[StudentSummary], users: Sequence[User]) -> "OrderedDict[str, List[StudentSummary]]":
    """
    Öğrencileri her TUTOR altında gruplar. tutor_id'si tutor olmayan bilinen
    bir kullanıcıyı (yönetici) gösterenler OUTROS grubuna gider; karşılığı
    olmayan tutor referansları yazdırılan raporda olduğu gibi dışarıda kalır.
    """
    groups: "OrderedDict[str, List[StudentSummary]]" = OrderedDict()
    for user in users:
        if user.role == "TUTOR":
            groups[user.id] = [s for s in students if s.tutor_id == user.id]
    others = [
        s for s in students
        if s.tutor_id not in groups and tutor_name(s.tutor_id, users) != UNASSIGNED_TUTOR
    ]
    if others:
        groups[OTHERS_GROUP] = others
    return groups
