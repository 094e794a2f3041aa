# app/tutorado/api/schemas/user.py
from pydantic import Field
from typing import Dict, List, Optional

from ...models.entities import EntityModel, Role


class LoginRequest(EntityModel):
    identifier: str = Field("", description="Kullanıcı id'si (ör. ADM001) ya da ismin bir parçası.")
    password: str = ""


class UserResponse(EntityModel):
    """Kullanıcının dışa açık görünümü; şifre bu model üzerinden asla dönmez."""
    id: str
    name: str
    role: Role
    photo: Optional[str] = None


class LoginResponse(EntityModel):
    user: UserResponse
    offline: bool = Field(False, description="Hiç kullanıcı yüklenmediyse ve acil durum girişi kullanıldıysa True.")


class UserSaveRequest(EntityModel):
    id: str = ""
    name: str = Field(..., min_length=1)
    role: Role = "TUTOR"
    photo: Optional[str] = None
    password: Optional[str] = None


class HealthResponse(EntityModel):
    status: str
    loading: bool
    offline: bool
    missing_config: List[str] = []
    loaded: Dict[str, bool] = {}
