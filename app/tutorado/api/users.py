from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List

from .schemas.user import UserResponse, UserSaveRequest
from ..models.entities import User
from ..services.data_service import DataService
from ..services.errors import ProtectedIdentityError, StoreUnavailableError
from .dependencies import get_current_user, get_data_service, require_admin

router = APIRouter(prefix="/users", tags=["Team"])


@router.get("", response_model=List[UserResponse], summary="List administrators and tutors")
async def list_users(user: User = Depends(get_current_user), service: DataService = Depends(get_data_service)):
    return [UserResponse.model_validate(u.model_dump()) for u in service.cache.users]


@router.get("/{user_id}", response_model=User, summary="Fetch the full user record, password included")
async def get_user(user_id: str, admin: User = Depends(require_admin), service: DataService = Depends(get_data_service)):
    found = await service.get_user_detail(user_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found or store unavailable.")
    return found


@router.post("", response_model=User, summary="Create or update a user")
async def save_user(save_request: UserSaveRequest, user: User = Depends(get_current_user), service: DataService = Depends(get_data_service)):
    # Tutorlar yalnızca kendi kayıtlarını düzenleyebilir ve rollerini değiştiremez.
    if not user.is_admin and (save_request.id != user.id or save_request.role != user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only administrators can manage other users.")
    try:
        return await service.save_user(User.model_validate(save_request.model_dump()))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a user other than yourself")
async def delete_user(user_id: str, admin: User = Depends(require_admin), service: DataService = Depends(get_data_service)):
    try:
        await service.delete_user(user_id, acting_user=admin)
    except ProtectedIdentityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
