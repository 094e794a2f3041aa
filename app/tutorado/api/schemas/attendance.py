# app/tutorado/api/schemas/attendance.py
from pydantic import Field
from typing import Optional

from ...models.entities import Dimension, EntityModel


class AttendanceSaveRequest(EntityModel):
    """
    Atendimento formu. Bilinen bir id o kaydı düzenler; istemcinin gönderdiği
    tutor alanları yok sayılır, tutor bilgisi oturumdan ya da orijinal
    kayıttan gelir.
    """
    id: Optional[str] = None
    student_id: str = Field(..., min_length=1)
    date: str = Field(..., min_length=10, description="YYYY-MM-DD")
    dimension: Dimension = "Acadêmica"
    subject: str = Field(..., min_length=1)
    notes: Optional[str] = ""
