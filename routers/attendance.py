from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, date as dt_date  # ✅ 'date' is also a query param name
from typing import Optional

from routers.deps import get_store
from schemas.attendance import AttendanceSubmit
from services import attendance as attendance_service
from services import students as student_service
from services.datastore import Between

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _parse_day(value: str) -> dt_date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be YYYY-MM-DD")


def _parse_month(value: str):
    try:
        year, month_num = map(int, value.split('-'))
        dt_date(year, month_num, 1)
    except ValueError:
        raise HTTPException(status_code=400, detail="Month must be YYYY-MM")
    return year, month_num


# 1. GET DATA FOR MARKING SCREEN
@router.get("/get-data")
def get_attendance_data(date: str, category: str = "All", store=Depends(get_store)):
    date_obj = _parse_day(date)
    roster = student_service.active_roster(store, category)
    existing = store.select_filtered("attendance", {"date": date_obj})
    return {
        "date": date_obj,
        "students": attendance_service.session_sheet(roster, existing, category),
    }


# 2. SAVE SESSION (one upsert per student+date)
@router.post("/save")
def save_attendance(payload: AttendanceSubmit, store=Depends(get_store)):
    roster = student_service.active_roster(store)
    selections = {item.student_id: item.status for item in payload.attendance}
    saved = attendance_service.save_session(store, roster, payload.date, selections, payload.category)
    return {"message": "Attendance Saved!", "saved_count": saved}


# 3. MONTHLY REGISTER
@router.get("/get-register")
def get_monthly_register(month: str, category: str = "All", store=Depends(get_store)):
    year, month_num = _parse_month(month)
    days = attendance_service.month_days(year, month_num)

    roster = student_service.active_roster(store, category)
    records = store.select_filtered("attendance", {
        "date": Between(days[0], days[-1]),
        "student_id": [s.id for s in roster],
    })
    # Days that haven't happened yet are not counted as absences
    report = attendance_service.monthly_register(roster, records, year, month_num, until=dt_date.today())
    return {"days": [d.isoformat() for d in days], "report": report}


# 4. SUMMARY (by category or by student)
@router.get("/summary")
def get_attendance_summary(group_by: str = "category", start: Optional[str] = None, end: Optional[str] = None,
                           store=Depends(get_store)):
    criteria = {}
    if start or end:
        low = _parse_day(start) if start else dt_date.min
        high = _parse_day(end) if end else dt_date.max
        criteria["date"] = Between(low, high)
    marks = store.select_filtered("attendance", criteria)

    if group_by == "category":
        return attendance_service.summarize_by_category(marks, store.select_all("students"))
    if group_by == "student":
        return attendance_service.summarize_by_student(marks)
    raise HTTPException(status_code=400, detail="group_by must be 'category' or 'student'")
