# app/tutorado/models/entities.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional

Role = Literal["ADMIN", "TUTOR"]

Dimension = Literal[
    "Cognitiva", "Socioemocional", "Comportamental", "Pessoal", "Acadêmica", "Profissional"
]

DIMENSIONS: List[str] = [
    "Cognitiva", "Socioemocional", "Comportamental", "Pessoal", "Acadêmica", "Profissional"
]

# Atendimento oluşturma formunda yalnızca bu üçü sunulur.
FORM_DIMENSIONS: List[str] = ["Pessoal", "Acadêmica", "Profissional"]

SERIES_OPTIONS: List[str] = [
    "6ºSérie", "7ºSérie", "8ºSérie", "9ºSérie", "1ºSérie", "2ºSérie", "3ºSérie"
]

LIVING_OPTIONS: List[str] = ["Pais", "Mãe", "Pai", "Avós", "Outros"]


class EntityModel(BaseModel):
    """
    Bellekteki varlıklar için temel sınıf. Alanlar snake_case; sunum katmanı
    camelCase takma adları görür.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(EntityModel):
    """
    Yönetici ya da tutor. id öneki (ADM/TUT) rolü yalnızca oluşturulma
    anında yansıtır; id sonradan düzenlenebilir.
    """
    id: str = Field("", description="ADM001 ya da TUT001 biçiminde kimlik. Atanana kadar boş.")
    name: str
    role: Role
    photo: Optional[str] = None
    password: Optional[str] = Field(None, description="Düz metin. None ise şifresiz giriş yapılır.")

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


class StudentSummary(EntityModel):
    """Başlangıçta toplu yüklenen kısaltılmış görünüm."""
    id: str = Field("", description="ALU001 biçiminde kimlik. Atanana kadar boş.")
    tutor_id: str = ""
    name: str = ""
    series: str = ""
    birth_date: str = ""


class StudentDetail(StudentSummary):
    """
    Tam görünüm, gerektiğinde kayıt bazında çekilir. Özetten tam kayda geçmek
    için DataService.get_student_detail(id) çağrılır.
    """
    phone_student: str = ""
    phone_guardian: str = ""
    schools_attended: str = ""
    photo: Optional[str] = None

    # Aile
    father_name: str = ""
    father_age: str = ""
    father_job: str = ""
    mother_name: str = ""
    mother_age: str = ""
    mother_job: str = ""
    siblings: str = ""
    living_arrangement: str = ""

    # Kaynaklar ve rutin
    has_device: List[str] = Field(default_factory=list)
    has_internet: bool = False
    has_pet: bool = False
    pet_details: Optional[str] = None
    courses_external: bool = False
    course_details: Optional[str] = None
    study_at_home: bool = False
    study_time: Optional[str] = None
    likes_reading: bool = False
    book_type: Optional[str] = None
    sports: bool = False
    sport_details: Optional[str] = None
    leisure_activity: str = ""
    dislikes_activity: str = ""
    sleep_time: str = ""
    wake_time: str = ""
    life_project: str = ""

    # Protagonizm
    roles: List[str] = Field(default_factory=list)

    # Performans belgeleri (base64 ya da URL)
    performance_doc: Optional[str] = None
    performance_doc_type: Optional[Literal["image", "pdf", "text"]] = None


class Attendance(EntityModel):
    """
    Kaydedilmiş bir tutoria görüşmesi. student_name ve tutor_name kayıt
    oluşturulurken alınan anlık görüntülerdir; tutor bilgisi sonradan değişmez.
    """
    id: str = Field("", description="ATD + epoch milisaniye. Kaydedilene kadar boş.")
    student_id: str
    student_name: str = ""
    tutor_id: str = ""
    tutor_name: str = ""
    date: str = Field(..., description="ISO tarih, YYYY-MM-DD")
    dimension: Dimension = "Acadêmica"
    subject: str = ""
    notes: str = ""


class AccessLogEntry(BaseModel):
    """Yalnızca eklenebilen access_logs tablosunun bir satırı."""
    user_id: str
    user_name: str
    role: str
    action: Literal["login", "logout"]
    logged_at: str
    user_agent: str = ""
