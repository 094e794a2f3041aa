# app/tutorado/api/schemas/student.py
from pydantic import Field

from ...models.entities import StudentDetail


class StudentSaveRequest(StudentDetail):
    """Tam öğrenci formu. Zorunlu alanlar yalnızca isim ve tutor."""
    name: str = Field(..., min_length=1)
    tutor_id: str = Field(..., min_length=1)
