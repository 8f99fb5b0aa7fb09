from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from datetime import date as dt_date

from routers.deps import get_store
from schemas.attendance import AttendanceSummary
from schemas.students import StudentCreate, StudentUpdate
from services import attendance as attendance_service
from services import fees as fee_service
from services import performance as performance_service
from services import students as student_service

router = APIRouter(prefix="/students", tags=["Students"])

# ===============================
#   1. SPECIFIC ROUTES (before /{student_id})
# ===============================

# --- Filter API ---
@router.get("/api/filter")
def filter_students(category: str = "All", search: str = "", include_inactive: bool = False,
                    store=Depends(get_store)):
    """Search by name, id or email within a category."""
    if include_inactive:
        students = store.select_all("students")
    else:
        students = student_service.active_roster(store)
    students = student_service.filter_students(students, search, category)

    result = []
    for s in students:
        summary = fee_service.summarize_student(s)
        result.append({
            **s.model_dump(),
            "fee_status": summary.status,
            "due_amount": summary.amount_due,
            "dues_alert": summary.amount_due > 0,
        })
    return result


@router.get("/api/categories")
def get_categories():
    return {
        "categories": student_service.CATEGORIES,
        "courses": student_service.CATEGORY_COURSES,
    }


@router.get("/api/export")
def export_students(category: str = "All", search: str = "", store=Depends(get_store)):
    students = student_service.filter_students(student_service.active_roster(store), search, category)
    csv_text = student_service.export_csv(students)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="students_export.csv"'},
    )


@router.get("/api/bulk-import/template")
def get_import_template():
    return student_service.import_template()


@router.post("/api/bulk-import")
async def bulk_import_students(file: UploadFile = File(...), store=Depends(get_store)):
    contents = await file.read()
    df = student_service.read_import_file(file.filename, contents)
    return student_service.import_students(store, df)


# ===============================
#   2. STUDENT CRUD OPERATIONS
# ===============================

@router.post("/", status_code=201)
def add_student(payload: StudentCreate, store=Depends(get_store)):
    student = student_service.enroll_student(store, payload)
    return {"message": "Student Added Successfully", "student": student}


@router.get("/{student_id}")
def get_student_detail(student_id: int, store=Depends(get_store)):
    student = student_service.load_student(store, student_id)
    marks = store.select_filtered("attendance", {"student_id": student_id})
    results = [
        r for r in store.select_all("performance")
        if performance_service.belongs_to(r, student)
    ]
    att = attendance_service.summarize_by_student(marks)

    return {
        "student": student,
        "fees": fee_service.summarize_student(student),
        "payments": fee_service.payment_history(store, student_id),
        "attendance": att[0] if att else AttendanceSummary(
            group=str(student_id), present_count=0, total_count=0, percentage=0),
        "performance": performance_service.summarize(results, [student])[0],
        "results": sorted(results, key=lambda r: (r.date or dt_date.min, r.result_id), reverse=True),
    }


@router.put("/{student_id}")
def update_student(student_id: int, payload: StudentUpdate, store=Depends(get_store)):
    student = student_service.update_student(store, student_id, payload)
    return {"message": "Student Updated", "student": student}


@router.post("/{student_id}/deactivate")
def deactivate_student(student_id: int, store=Depends(get_store)):
    student = student_service.deactivate_student(store, student_id)
    return {"message": "Student Deactivated", "student": student}
