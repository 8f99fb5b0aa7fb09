"""
Attendance roll-ups and marking sessions.

Two defaults live here and nowhere else:
  - a new marking session starts every roster student at Present
  - inside a reporting window, a day with no mark counts as Absent
"""
import calendar
import logging
from datetime import date
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from errors import InvalidStatus, MissingDate
from schemas.attendance import AttendanceMarkRecord, AttendanceSummary, RegisterRow
from schemas.students import StudentRecord
from utils.helpers import round_half_up

logger = logging.getLogger(__name__)

STATUSES = ["Present", "Absent", "Late"]
SESSION_DEFAULT_STATUS = "Present"
MISSING_MARK_STATUS = "Absent"
CONFLICT_KEYS = ("student_id", "date")


def is_present(status) -> bool:
    return isinstance(status, str) and status.lower() == "present"


def normalize_status(status) -> str:
    if isinstance(status, str):
        wanted = status.strip().lower()
        for known in STATUSES:
            if known.lower() == wanted:
                return known
    raise InvalidStatus(f"Invalid attendance status '{status}'")


def percentage(present_count: int, total_count: int) -> int:
    if total_count == 0:
        return 0
    return round_half_up(present_count / total_count * 100)


def in_category(student: StudentRecord, category: Optional[str]) -> bool:
    return not category or category == "All" or student.category == category


# =====================
# ROLL-UPS
# =====================

def summarize(marks: Iterable[AttendanceMarkRecord], key: Callable[[AttendanceMarkRecord], str]) -> List[AttendanceSummary]:
    """Group marks by key(mark); groups keep first-seen order."""
    counts: Dict[str, List[int]] = {}
    for mark in marks:
        group = counts.setdefault(key(mark), [0, 0])
        group[1] += 1
        if is_present(mark.status):
            group[0] += 1

    return [
        AttendanceSummary(group=name, present_count=present, total_count=total,
                          percentage=percentage(present, total))
        for name, (present, total) in counts.items()
    ]


def summarize_by_category(marks, roster: Iterable[StudentRecord]) -> List[AttendanceSummary]:
    category_of = {s.id: s.category for s in roster}
    return summarize(marks, lambda m: category_of.get(m.student_id) or "Unknown")


def summarize_by_student(marks) -> List[AttendanceSummary]:
    return summarize(marks, lambda m: str(m.student_id))


# =====================
# MARKING SESSION
# =====================

def build_session(roster: Iterable[StudentRecord], on_date: Optional[date],
                  selections: Optional[Mapping[int, str]] = None,
                  category: Optional[str] = None) -> List[dict]:
    """Upsert rows for one day: every in-scope student, Present unless overridden."""
    if on_date is None:
        raise MissingDate()
    selections = selections or {}

    batch = []
    for student in roster:
        if not in_category(student, category):
            continue
        chosen = selections.get(student.id)
        status = normalize_status(chosen) if chosen is not None else SESSION_DEFAULT_STATUS
        batch.append({"student_id": student.id, "date": on_date, "status": status})
    return batch


def session_sheet(roster: Iterable[StudentRecord], marks: Iterable[AttendanceMarkRecord],
                  category: Optional[str] = None) -> List[dict]:
    """Rows for the marking screen, pre-filled with what was already saved."""
    saved = {m.student_id: m.status for m in marks}
    return [
        {
            "id": s.id,
            "name": s.name,
            "category": s.category,
            "course": s.course,
            "status": saved.get(s.id) or SESSION_DEFAULT_STATUS,
        }
        for s in roster if in_category(s, category)
    ]


def save_session(store, roster: Iterable[StudentRecord], on_date: Optional[date],
                 selections: Optional[Mapping[int, str]] = None,
                 category: Optional[str] = None) -> int:
    batch = build_session(roster, on_date, selections, category)
    if not batch:
        return 0
    with store.transaction():
        written = store.upsert("attendance", batch, CONFLICT_KEYS)
    logger.info("Saved attendance for %s: %s marks (category=%s)", on_date, written, category or "All")
    return written


# =====================
# MONTHLY REGISTER
# =====================

def month_days(year: int, month: int) -> List[date]:
    num_days = calendar.monthrange(year, month)[1]
    return [date(year, month, d) for d in range(1, num_days + 1)]


def monthly_register(roster: Iterable[StudentRecord], marks: Iterable[AttendanceMarkRecord],
                     year: int, month: int, until: Optional[date] = None) -> List[RegisterRow]:
    days = month_days(year, month)
    window_end = days[-1] if until is None else min(days[-1], until)

    att_map: Dict[int, Dict[date, str]] = {}
    for m in marks:
        att_map.setdefault(m.student_id, {})[m.date] = m.status

    report = []
    for s in roster:
        saved = att_map.get(s.id, {})
        days_data = {}
        present = late = total = 0
        for d in days:
            if d > window_end:
                days_data[d.isoformat()] = ""
                continue
            status = saved[d] if d in saved else MISSING_MARK_STATUS
            days_data[d.isoformat()] = status or ""
            total += 1
            if is_present(status):
                present += 1
            elif isinstance(status, str) and status.lower() == "late":
                late += 1

        report.append(RegisterRow(
            student_id=s.id,
            name=s.name,
            category=s.category,
            days=days_data,
            present=present,
            absent=total - present - late,
            late=late,
            total=total,
            percentage=percentage(present, total),
        ))
    return report
