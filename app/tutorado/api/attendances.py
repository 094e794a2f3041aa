from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import PlainTextResponse
from typing import List, Optional

from .schemas.attendance import AttendanceSaveRequest
from ..models.entities import Attendance, User
from ..services import reports
from ..services.data_service import DataService
from ..services.errors import PermissionDeniedError, StoreUnavailableError
from .dependencies import get_current_user, get_data_service

router = APIRouter(prefix="/attendances", tags=["Attendances"])


def _filtered(service: DataService, date_start: Optional[str], date_end: Optional[str], student_name: Optional[str]) -> List[Attendance]:
    return reports.filter_attendances(
        service.cache.attendances,
        service.cache.students,
        date_start=date_start,
        date_end=date_end,
        student_name=student_name,
    )


@router.get("", response_model=List[Attendance], summary="List attendances, newest first")
async def list_attendances(
    date_start: Optional[str] = None,
    date_end: Optional[str] = None,
    student_name: Optional[str] = None,
    user: User = Depends(get_current_user),
    service: DataService = Depends(get_data_service),
):
    return _filtered(service, date_start, date_end, student_name)


@router.get("/export.txt", response_class=PlainTextResponse, summary="Export the filtered attendances as plain text")
async def export_attendances_txt(
    date_start: Optional[str] = None,
    date_end: Optional[str] = None,
    student_name: Optional[str] = None,
    user: User = Depends(get_current_user),
    service: DataService = Depends(get_data_service),
):
    content = reports.attendances_txt(_filtered(service, date_start, date_end, student_name))
    filename = f"relatorio_atendimentos_{date.today().isoformat()}.txt"
    return PlainTextResponse(content, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.post("", response_model=Attendance, summary="Log a new attendance or edit an existing one")
async def save_attendance(
    save_request: AttendanceSaveRequest,
    user: User = Depends(get_current_user),
    service: DataService = Depends(get_data_service),
):
    draft = Attendance(
        id=save_request.id or "",
        student_id=save_request.student_id,
        date=save_request.date,
        dimension=save_request.dimension,
        subject=save_request.subject,
        notes=save_request.notes or "",
    )
    try:
        return await service.save_attendance(draft, acting_user=user)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.delete("/{attendance_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an attendance")
async def delete_attendance(attendance_id: str, user: User = Depends(get_current_user), service: DataService = Depends(get_data_service)):
    try:
        await service.delete_attendance(attendance_id, acting_user=user)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
