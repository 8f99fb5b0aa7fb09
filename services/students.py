"""
Student records: enrollment, edits, soft deactivation, search,
CSV export and spreadsheet bulk import.
"""
import io
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

from errors import InvalidAmount, InvalidCategory, MissingField, UnknownStudent, ValidationError
from schemas.fees import PaymentRequest
from schemas.students import StudentCreate, StudentRecord, StudentUpdate
from services import fees
from utils.helpers import parse_date, round_money, safe_float, safe_int, safe_str

logger = logging.getLogger(__name__)

# =====================
# CATEGORY / COURSE CATALOG
# =====================

SCHOOL_COURSES = [
    "SSC 8th", "SSC 9th", "SSC 10th",
    "CBSE 8th", "CBSE 9th", "CBSE 10th",
    "ICSE 8th", "ICSE 9th", "ICSE 10th",
    "Others",
]
JUNIOR_COLLEGE_COURSES = ["Science", "Commerce", "Arts"]
DIPLOMA_BRANCHES = ["Computer Science", "Mechanical", "Electrical", "Civil"]
DIPLOMA_YEARS = ["1st Year", "2nd Year", "3rd Year"]
DEGREE_BRANCHES = ["B.Tech Computer Science", "B.Tech Mechanical", "B.Com", "B.A"]
DEGREE_YEARS = ["1st Year", "2nd Year", "3rd Year", "4th Year"]
ENTRANCE_EXAM_COURSES = ["NEET", "JEE", "MHTCET", "Boards"]

CATEGORY_COURSES: Dict[str, List[str]] = {
    "School": SCHOOL_COURSES,
    "Junior College": JUNIOR_COLLEGE_COURSES,
    "Diploma": [f"{b} - {y}" for b in DIPLOMA_BRANCHES for y in DIPLOMA_YEARS],
    "Degree": [f"{b} - {y}" for b in DEGREE_BRANCHES for y in DEGREE_YEARS],
    "Entrance Exams": ENTRANCE_EXAM_COURSES,
}
CATEGORIES = list(CATEGORY_COURSES)

REQUIRED_FIELDS = ["name", "course", "email", "phone"]

EXPORT_COLUMNS = [
    "ID", "Name", "Category", "Course", "Email", "Phone",
    "Enrollment Date", "Fee Status", "Total Fee", "Paid Fee", "Remaining Fee",
]


def check_category(category) -> str:
    if category not in CATEGORY_COURSES:
        raise InvalidCategory(f"Unknown category '{category}'")
    return category


def check_total_fee(total_fee) -> float:
    if total_fee is None:
        return 0.0
    if not math.isfinite(total_fee):
        raise InvalidAmount("Please enter a valid total fee.")
    if total_fee < 0:
        raise InvalidAmount("Total fee cannot be negative.")
    return round_money(total_fee)


def validate_enrollment(payload: StudentCreate) -> None:
    for field in REQUIRED_FIELDS:
        if not (getattr(payload, field) or "").strip():
            raise MissingField()
    check_category(payload.category)
    check_total_fee(payload.total_fee)
    if (payload.paid_fee or 0) < 0:
        raise InvalidAmount("Paid amount cannot be negative.")
    fees.installment_amount(payload.total_fee, payload.installments)
    if payload.paid_fee:
        fees.validate_amount(payload.paid_fee)
        fees.normalize_method(payload.payment_method)


# =====================
# LIFECYCLE
# =====================

def load_student(store, student_id: int) -> StudentRecord:
    student = store.get("students", student_id)
    if student is None:
        raise UnknownStudent(f"Student {student_id} not found")
    return student


def enroll_student(store, payload: StudentCreate) -> StudentRecord:
    """Create the student row; an amount paid at the desk goes through the ledger."""
    validate_enrollment(payload)
    total_fee = check_total_fee(payload.total_fee)
    enrolled_on = payload.enrollment_date or date.today()

    with store.transaction():
        student_id = store.insert("students", {
            "name": payload.name.strip(),
            "category": payload.category,
            "course": payload.course.strip(),
            "email": payload.email.strip(),
            "phone": payload.phone.strip(),
            "enrollment_date": enrolled_on,
            "total_fee": total_fee,
            "paid_fee": 0.0,
            "due_amount": fees.due_amount(total_fee, 0),
            "fee_status": fees.fee_status(total_fee, 0),
            "installments": payload.installments,
            "installment_amt": fees.installment_amount(total_fee, payload.installments),
            "is_active": True,
        })
        if payload.paid_fee and payload.paid_fee > 0:
            fees.record_payment(store, PaymentRequest(
                student_id=student_id,
                amount=payload.paid_fee,
                payment_date=enrolled_on,
                payment_method=payload.payment_method,
                description="Paid at enrollment",
            ))

    logger.info("Enrolled student %s (%s, %s)", student_id, payload.category, payload.course)
    return load_student(store, student_id)


def update_student(store, student_id: int, payload: StudentUpdate) -> StudentRecord:
    student = load_student(store, student_id)
    # null clears installments back to no plan; other fields ignore nulls
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k == "installments"
    }

    for field in ("name", "course", "email", "phone"):
        if field in changes:
            changes[field] = changes[field].strip()
            if not changes[field]:
                raise MissingField()
    if "category" in changes:
        check_category(changes["category"])
    if "total_fee" in changes:
        changes["total_fee"] = check_total_fee(changes["total_fee"])
    if "total_fee" in changes or "installments" in changes:
        installments = changes.get("installments", student.installments)
        total_fee = changes.get("total_fee", student.total_fee)
        changes["installment_amt"] = fees.installment_amount(total_fee, installments)

    if not changes:
        return student

    with store.transaction():
        store.update("students", student_id, changes)
        if "total_fee" in changes:
            fees.reconcile_student(store, student_id)

    logger.info("Updated student %s: %s", student_id, ", ".join(sorted(changes)))
    return load_student(store, student_id)


def deactivate_student(store, student_id: int) -> StudentRecord:
    load_student(store, student_id)
    store.update("students", student_id, {"is_active": False})
    logger.info("Deactivated student %s", student_id)
    return load_student(store, student_id)


def active_roster(store, category: Optional[str] = None) -> List[StudentRecord]:
    criteria: Dict[str, Any] = {"is_active": True}
    if category and category != "All":
        criteria["category"] = category
    return store.select_filtered("students", criteria)


def filter_students(students: List[StudentRecord], search: str = "", category: Optional[str] = None) -> List[StudentRecord]:
    term = (search or "").strip().lower()
    result = []
    for s in students:
        if category and category != "All" and s.category != category:
            continue
        if term and not (
            term in (s.name or "").lower()
            or term in str(s.id)
            or term in (s.email or "").lower()
        ):
            continue
        result.append(s)
    return result


# =====================
# CSV EXPORT
# =====================

def export_csv(students: List[StudentRecord]) -> str:
    rows = [
        [
            s.id, s.name, s.category, s.course, s.email, s.phone,
            s.enrollment_date.isoformat() if s.enrollment_date else "",
            fees.fee_status(s.total_fee, s.paid_fee),
            s.total_fee, s.paid_fee,
            fees.due_amount(s.total_fee, s.paid_fee),
        ]
        for s in students
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    return df.to_csv(index=False)


# =====================
# BULK IMPORT
# =====================

IMPORT_REQUIRED_COLUMNS = ["name", "category", "course", "email", "phone"]
IMPORT_OPTIONAL_COLUMNS = ["total_fee", "paid_fee", "installments", "enrollment_date", "payment_method"]


def read_import_file(filename: str, contents: bytes) -> pd.DataFrame:
    name = (filename or "").lower()
    if not name.endswith((".xlsx", ".xls", ".csv")):
        raise ValidationError("Invalid file format. Please upload an Excel (.xlsx/.xls) or CSV file")
    try:
        if name.endswith(".csv"):
            df = pd.read_csv(io.BytesIO(contents))
        else:
            engine = "openpyxl" if name.endswith(".xlsx") else None
            df = pd.read_excel(io.BytesIO(contents), engine=engine)
    except Exception as e:
        raise ValidationError(f"Error reading file: {e}")
    df.columns = df.columns.astype(str).str.strip().str.lower()
    return df


def _row_to_payload(row) -> StudentCreate:
    return StudentCreate(
        name=safe_str(row.get("name")) or "",
        category=safe_str(row.get("category")) or "",
        course=safe_str(row.get("course")) or "",
        email=safe_str(row.get("email")) or "",
        phone=safe_str(row.get("phone")) or "",
        enrollment_date=parse_date(row.get("enrollment_date")),
        total_fee=safe_float(row.get("total_fee")) or 0.0,
        paid_fee=safe_float(row.get("paid_fee")) or 0.0,
        payment_method=safe_str(row.get("payment_method")) or "Cash",
        installments=safe_int(row.get("installments")),
    )


def import_students(store, df: pd.DataFrame) -> dict:
    """Validate every row, then enroll all valid rows in one transaction."""
    missing = [c for c in IMPORT_REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError(f"Missing column(s): {', '.join(missing)}")

    errors = []
    payloads = []
    for idx, row in df.iterrows():
        row_num = idx + 2  # header is row 1
        if row.isna().all():
            continue
        try:
            payload = _row_to_payload(row)
            validate_enrollment(payload)
        except ValidationError as e:
            errors.append({"row": row_num, "error": e.message})
            continue
        payloads.append(payload)

    imported = []
    if payloads:
        with store.transaction():
            for payload in payloads:
                imported.append(enroll_student(store, payload).id)

    logger.info("Bulk import: %s imported, %s rejected", len(imported), len(errors))
    return {
        "success": True,
        "total_rows": len(df),
        "imported_count": len(imported),
        "error_count": len(errors),
        "errors": errors,
        "student_ids": imported,
    }


def import_template() -> dict:
    return {
        "required_columns": IMPORT_REQUIRED_COLUMNS,
        "optional_columns": IMPORT_OPTIONAL_COLUMNS,
        "notes": [
            f"category must be one of: {', '.join(CATEGORIES)}",
            "paid_fee is recorded as a payment dated on the enrollment date",
            "installments must be between 1 and 24",
            "enrollment_date should be in format: YYYY-MM-DD or DD-MM-YYYY or DD/MM/YYYY",
        ],
    }
