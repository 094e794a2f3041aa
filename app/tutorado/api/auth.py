import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status

from .schemas.user import LoginRequest, LoginResponse, UserResponse
from ..models.entities import User
from ..services.data_service import DataService
from ..services.errors import AuthenticationRejected, StillLoadingError
from .dependencies import get_current_user, get_data_service, get_user_agent

# Bu modül için özel bir logger oluşturuyoruz.
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_request: LoginRequest,
    service: DataService = Depends(get_data_service),
    user_agent: str = Depends(get_user_agent),
):
    """Kimlik bir id ya da ismin bir parçası olabilir. Yedek giriş kuralları için AuthService'e bakın."""
    try:
        service.ensure_ready()
    except StillLoadingError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    offline = service.is_offline
    try:
        user = await service.auth.login(login_request.identifier, login_request.password, user_agent=user_agent)
    except AuthenticationRejected as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return LoginResponse(user=UserResponse.model_validate(user.model_dump()), offline=offline)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    service: DataService = Depends(get_data_service),
    current_user: User = Depends(get_current_user),
    user_agent: str = Depends(get_user_agent),
):
    logger.info(f"User '{current_user.id}' logging out.")
    await service.auth.logout(user_agent=user_agent)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user.model_dump())
