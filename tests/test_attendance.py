from datetime import date

import pytest

from errors import InvalidStatus, MissingDate
from schemas.attendance import AttendanceMarkRecord
from schemas.students import StudentRecord
from services import attendance
from services import students as student_service


def _student(id, category="School", name=None):
    return StudentRecord(id=id, name=name or f"Student {id}", category=category, course="SSC 10th")


def _mark(student_id, status, day=1):
    return AttendanceMarkRecord(student_id=student_id, date=date(2024, 3, day), status=status)


@pytest.mark.parametrize("present, total, expected", [
    (0, 0, 0),
    (0, 4, 0),
    (4, 4, 100),
    (1, 3, 33),
    (2, 3, 67),
    (1, 8, 13),   # 12.5 rounds up
])
def test_percentage(present, total, expected):
    assert attendance.percentage(present, total) == expected


def test_is_present_ignores_case_only():
    assert attendance.is_present("Present")
    assert attendance.is_present("PRESENT")
    assert not attendance.is_present("Late")
    assert not attendance.is_present(" present ")
    assert not attendance.is_present(None)


def test_summarize_by_category():
    roster = [_student(1), _student(2, "Diploma")]
    marks = [
        _mark(1, "present"), _mark(1, "Absent", 2),
        _mark(2, "Late"), _mark(2, "Present", 2),
        _mark(99, "Present"),
    ]
    summaries = attendance.summarize_by_category(marks, roster)

    assert [s.group for s in summaries] == ["School", "Diploma", "Unknown"]
    school, diploma, unknown = summaries
    assert (school.present_count, school.total_count, school.percentage) == (1, 2, 50)
    assert (diploma.present_count, diploma.total_count, diploma.percentage) == (1, 2, 50)
    assert unknown.total_count == 1


def test_summarize_by_student():
    marks = [_mark(3, "Present"), _mark(3, "Present", 2), _mark(3, "Absent", 3)]
    [summary] = attendance.summarize_by_student(marks)
    assert summary.group == "3"
    assert summary.percentage == 67


def test_summarize_empty():
    assert attendance.summarize_by_student([]) == []


def test_build_session_defaults_to_present():
    roster = [_student(1), _student(2), _student(3, "Degree")]
    batch = attendance.build_session(roster, date(2024, 3, 1), {2: "absent"}, category="School")

    assert batch == [
        {"student_id": 1, "date": date(2024, 3, 1), "status": "Present"},
        {"student_id": 2, "date": date(2024, 3, 1), "status": "Absent"},
    ]


def test_build_session_empty_roster():
    assert attendance.build_session([], date(2024, 3, 1)) == []


def test_build_session_rejects_bad_input():
    with pytest.raises(MissingDate):
        attendance.build_session([_student(1)], None)
    with pytest.raises(InvalidStatus):
        attendance.build_session([_student(1)], date(2024, 3, 1), {1: "Sick"})


def test_session_sheet_prefills_saved_status():
    roster = [_student(1), _student(2)]
    rows = attendance.session_sheet(roster, [_mark(2, "Late")])
    assert [r["status"] for r in rows] == ["Present", "Late"]


def test_save_session_overwrites_same_day(store, make_student):
    first = make_student(name="Asha Patil")
    second = make_student(name="Ravi Kumar")
    roster = student_service.active_roster(store)
    day = date(2024, 3, 1)

    assert attendance.save_session(store, roster, day, {first.id: "absent"}) == 2
    assert attendance.save_session(store, roster, day, {first.id: "Late"}) == 2

    marks = store.select_filtered("attendance", {"date": day})
    assert len(marks) == 2
    assert {m.student_id: m.status for m in marks} == {first.id: "Late", second.id: "Present"}


def test_save_session_nothing_to_write(store):
    assert attendance.save_session(store, [], date(2024, 3, 1)) == 0
    assert store.select_all("attendance") == []


def test_save_session_invalid_status_writes_nothing(store, make_student):
    student = make_student()
    with pytest.raises(InvalidStatus):
        attendance.save_session(store, [student], date(2024, 3, 1), {student.id: "Holiday"})
    assert store.select_all("attendance") == []


def test_monthly_register_missing_days_are_absent():
    roster = [_student(1)]
    marks = [
        AttendanceMarkRecord(student_id=1, date=date(2024, 2, 1), status="Present"),
        AttendanceMarkRecord(student_id=1, date=date(2024, 2, 2), status="Late"),
    ]
    [row] = attendance.monthly_register(roster, marks, 2024, 2, until=date(2024, 2, 5))

    assert len(row.days) == 29
    assert row.days["2024-02-01"] == "Present"
    assert row.days["2024-02-03"] == "Absent"
    assert row.days["2024-02-06"] == ""
    assert (row.present, row.late, row.absent, row.total) == (1, 1, 3, 5)
    assert row.percentage == 20


def test_monthly_register_whole_month():
    [row] = attendance.monthly_register([_student(1)], [], 2023, 4)
    assert row.total == 30
    assert row.absent == 30
    assert row.percentage == 0
