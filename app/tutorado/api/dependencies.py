#app/tutorado/api/dependencies.py
import logging
from fastapi import Depends, HTTPException, Request, status

from ..models.entities import User
from ..services.auth_service import AuthService
from ..services.data_service import DataService

logger = logging.getLogger(__name__)


def get_data_service(request: Request) -> DataService:
    """
    Uygulamanın state'inden, lifespan sırasında kurulan DataService örneğini alır.
    Önbellek ve oturum bu tek örnekte yaşadığı için her istekte yeniden oluşturulmaz.
    """
    return request.app.state.data_service


def get_auth_service(service: DataService = Depends(get_data_service)) -> AuthService:
    return service.auth


def get_current_user(auth: AuthService = Depends(get_auth_service)) -> User:
    """Oturum açılmamışsa 401 döndürür."""
    if auth.current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in.")
    return auth.current_user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "ADMIN":
        logger.warning(f"User '{user.id}' tried to reach an administrator-only route.")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This operation is only valid for administrators.")
    return user


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "")
