"""
Exam performance statistics and result entry.

percentage is derived from marks/total_marks every time a result is
written; whatever percentage a client sends is ignored.
"""
import logging
import math
from typing import Iterable, List, Optional

from errors import InvalidMarks, InvalidTotalMarks, MissingDate, MissingField, UnknownResult, UnknownStudent
from schemas.performance import ExamResultRecord, PerformanceOverview, PerformanceSummary, ResultSubmit
from schemas.students import StudentRecord
from utils.helpers import round_half_up

logger = logging.getLogger(__name__)


def _number(value, error_cls) -> float:
    if value is None or isinstance(value, bool):
        raise error_cls()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise error_cls()
    if not math.isfinite(number):
        raise error_cls()
    return number


def exam_percentage(marks, total_marks) -> float:
    obtained = _number(marks, InvalidMarks)
    if obtained < 0:
        raise InvalidMarks()
    total = _number(total_marks, InvalidTotalMarks)
    if total <= 0:
        raise InvalidTotalMarks()
    return round_half_up(obtained / total * 100, 2)


def belongs_to(result: ExamResultRecord, student: StudentRecord) -> bool:
    # Older rows only carry the student's name
    if result.student_id is not None:
        return result.student_id == student.id
    return result.student_name == student.name


# =====================
# STATISTICS
# =====================

def summarize(results: Iterable[ExamResultRecord], roster: Iterable[StudentRecord]) -> List[PerformanceSummary]:
    results = list(results)
    summaries = []
    for student in roster:
        scores = [r.percentage for r in results if belongs_to(r, student)]
        total_exams = len(scores)
        summaries.append(PerformanceSummary(
            id=student.id,
            name=student.name,
            category=student.category,
            course=student.course,
            total_exams=total_exams,
            avg_percentage=round_half_up(sum(scores) / total_exams) if total_exams else 0,
            highest_percentage=max(scores) if scores else 0,
            lowest_percentage=min(scores) if scores else 0,
        ))
    return summaries


def overall_average(summaries: List[PerformanceSummary]) -> int:
    if not summaries:
        return 0
    return round_half_up(sum(s.avg_percentage for s in summaries) / len(summaries))


def top_performer(summaries: List[PerformanceSummary]) -> Optional[PerformanceSummary]:
    best = None
    for s in summaries:
        # strict comparison keeps the first student on a tie
        if best is None or s.avg_percentage > best.avg_percentage:
            best = s
    return best


def overview(results, roster) -> PerformanceOverview:
    summaries = summarize(results, roster)
    return PerformanceOverview(
        summaries=summaries,
        overall_average=overall_average(summaries),
        top_performer=top_performer(summaries),
    )


# =====================
# RESULT ENTRY
# =====================

def _prepare(store, submit: ResultSubmit) -> dict:
    """Validate a result form and build the full row to write."""
    if submit.student_id is None and not (submit.student_name or "").strip():
        raise MissingField("Please select a student or enter a new student name.")
    if not (submit.exam_name or "").strip():
        raise MissingField("Please enter the subject/exam name.")
    if submit.date is None:
        raise MissingDate("Please select the date of the test.")
    pct = exam_percentage(submit.marks, submit.total_marks)

    name = (submit.student_name or "").strip()
    category = (submit.student_category or "").strip() or None
    if submit.student_id is not None:
        student = store.get("students", submit.student_id)
        if student is None:
            raise UnknownStudent(f"Student {submit.student_id} not found")
        name, category = student.name, student.category

    return {
        "student_id": submit.student_id,
        "student_name": name,
        "student_category": category,
        "exam_name": submit.exam_name.strip(),
        "date": submit.date,
        "marks": float(submit.marks),
        "total_marks": float(submit.total_marks),
        "percentage": pct,
    }


def get_result(store, result_id: int) -> ExamResultRecord:
    result = store.get("performance", result_id)
    if result is None:
        raise UnknownResult(f"Result {result_id} not found")
    return result


def record_result(store, submit: ResultSubmit) -> ExamResultRecord:
    row = _prepare(store, submit)
    with store.transaction():
        result_id = store.insert("performance", row)
    logger.info("Recorded result %s for %s: %s (%.2f%%)", result_id, row["student_name"], row["exam_name"], row["percentage"])
    return get_result(store, result_id)


def edit_result(store, result_id: int, submit: ResultSubmit) -> ExamResultRecord:
    get_result(store, result_id)
    row = _prepare(store, submit)
    with store.transaction():
        store.update("performance", result_id, row)
    logger.info("Updated result %s (%.2f%%)", result_id, row["percentage"])
    return get_result(store, result_id)
