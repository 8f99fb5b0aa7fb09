from fastapi import APIRouter, Depends
from datetime import date

from routers.deps import get_store
from services import attendance as attendance_service
from services import fees as fee_service
from services import performance as performance_service
from services import students as student_service

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])


@router.get("/")
def dashboard_view(store=Depends(get_store)):
    # 1. Basic Counts
    students = student_service.active_roster(store)

    # 2. Attendance (chart by category + today's counts), active students only
    active_ids = {s.id for s in students}
    marks = [m for m in store.select_all("attendance") if m.student_id in active_ids]
    by_category = attendance_service.summarize_by_category(marks, students)

    today = date.today()
    todays = [m for m in marks if m.date == today]
    present = sum(1 for m in todays if attendance_service.is_present(m.status))
    absent = len(todays) - present
    unmarked = max(len(students) - len(todays), 0)

    # 3. Financials
    overview = fee_service.fee_overview([fee_service.summarize_student(s) for s in students])

    # 4. Performance
    perf = performance_service.overview(store.select_all("performance"), students)

    return {
        "total_students": len(students),
        "attendance_by_category": by_category,
        "att_present": present,
        "att_absent": absent,
        "att_unmarked": unmarked,
        "fees": overview,
        "overall_average": perf.overall_average,
        "top_performer": perf.top_performer,
    }
