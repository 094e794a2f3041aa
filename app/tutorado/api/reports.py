from fastapi import APIRouter, Depends
from typing import Dict, List

from ..models.entities import StudentSummary, User
from ..services import reports
from ..services.data_service import DataService
from .dependencies import get_current_user, get_data_service, require_admin

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/dashboard", summary="Totals, charts and birthdays for the dashboard")
async def dashboard(user: User = Depends(get_current_user), service: DataService = Depends(get_data_service)):
    cache = service.cache
    return reports.dashboard_stats(cache.students, cache.users, cache.attendances)


@router.get("/by-tutor", response_model=Dict[str, List[StudentSummary]], summary="Students grouped by tutor")
async def students_by_tutor(admin: User = Depends(require_admin), service: DataService = Depends(get_data_service)):
    return reports.students_by_tutor(service.cache.students, service.cache.users)
