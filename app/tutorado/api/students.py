from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import PlainTextResponse
from typing import List, Optional

from .schemas.student import StudentSaveRequest
from ..models.entities import (
    DIMENSIONS,
    FORM_DIMENSIONS,
    LIVING_OPTIONS,
    SERIES_OPTIONS,
    StudentDetail,
    StudentSummary,
    User,
)
from ..services import reports
from ..services.data_service import DataService
from ..services.errors import StoreUnavailableError
from .dependencies import get_current_user, get_data_service

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=List[StudentSummary], summary="List loaded students")
async def list_students(
    search: str = "",
    series: Optional[str] = None,
    user: User = Depends(get_current_user),
    service: DataService = Depends(get_data_service),
):
    return reports.filter_students(service.cache.students, search=search, series=series)


@router.get("/export.csv", response_class=PlainTextResponse, summary="Export the filtered student list as CSV")
async def export_students_csv(
    search: str = "",
    series: Optional[str] = None,
    user: User = Depends(get_current_user),
    service: DataService = Depends(get_data_service),
):
    students = reports.filter_students(service.cache.students, search=search, series=series)
    return PlainTextResponse(
        reports.students_csv(students),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="alunos_tutorado.csv"'},
    )


@router.get("/options", summary="Choice lists used by the student and attendance forms")
async def form_options(user: User = Depends(get_current_user)):
    return {
        "series": SERIES_OPTIONS,
        "living_arrangements": LIVING_OPTIONS,
        "dimensions": DIMENSIONS,
        "form_dimensions": FORM_DIMENSIONS,
    }


@router.get("/{student_id}", response_model=StudentDetail, summary="Fetch the full student record")
async def get_student(student_id: str, user: User = Depends(get_current_user), service: DataService = Depends(get_data_service)):
    student = await service.get_student_detail(student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found or store unavailable.")
    return student


@router.post("", response_model=StudentDetail, summary="Create or update a student")
async def save_student(
    save_request: StudentSaveRequest,
    user: User = Depends(get_current_user),
    service: DataService = Depends(get_data_service),
):
    try:
        return await service.save_student(StudentDetail.model_validate(save_request.model_dump()))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a student")
async def delete_student(student_id: str, user: User = Depends(get_current_user), service: DataService = Depends(get_data_service)):
    try:
        await service.delete_student(student_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
