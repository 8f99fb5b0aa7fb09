from datetime import date

import pytest

from errors import InvalidMarks, InvalidTotalMarks, MissingDate, MissingField, UnknownResult, UnknownStudent
from schemas.performance import ExamResultRecord, ResultSubmit
from schemas.students import StudentRecord
from services import performance


def _student(id, name):
    return StudentRecord(id=id, name=name, category="School", course="CBSE 10th")


def _result(result_id, pct, student_id=None, student_name=None):
    return ExamResultRecord(
        result_id=result_id, student_id=student_id, student_name=student_name,
        exam_name="Maths", date=date(2024, 3, 1), marks=pct, total_marks=100, percentage=pct,
    )


def test_exam_percentage():
    assert performance.exam_percentage(45, 50) == 90.0
    assert performance.exam_percentage(1, 3) == 33.33
    assert performance.exam_percentage(2, 3) == 66.67
    # marks above total are allowed (bonus questions)
    assert performance.exam_percentage(55, 50) == 110.0


@pytest.mark.parametrize("marks, total, error", [
    (10, 0, InvalidTotalMarks),
    (10, -5, InvalidTotalMarks),
    (10, None, InvalidTotalMarks),
    (-1, 50, InvalidMarks),
    (None, 50, InvalidMarks),
    ("abc", 50, InvalidMarks),
])
def test_exam_percentage_rejects(marks, total, error):
    with pytest.raises(error):
        performance.exam_percentage(marks, total)


def test_summaries_and_top_performer():
    roster = [_student(1, "Asha"), _student(2, "Ravi"), _student(3, "Sana")]
    results = [_result(1, 80, 1), _result(2, 60, 2), _result(3, 100, 3)]
    summaries = performance.summarize(results, roster)

    assert [s.avg_percentage for s in summaries] == [80, 60, 100]
    assert performance.overall_average(summaries) == 80
    assert performance.top_performer(summaries).name == "Sana"


def test_summary_statistics_per_student():
    roster = [_student(1, "Asha")]
    results = [_result(1, 85.5, 1), _result(2, 86, 1), _result(3, 40, 2)]
    [summary] = performance.summarize(results, roster)

    assert summary.total_exams == 2
    assert summary.avg_percentage == 86   # 85.75
    assert summary.highest_percentage == 86
    assert summary.lowest_percentage == 85.5


def test_students_without_exams_pull_the_average_down():
    roster = [_student(1, "Asha"), _student(2, "Ravi")]
    summaries = performance.summarize([_result(1, 90, 1)], roster)
    assert summaries[1].total_exams == 0
    assert summaries[1].avg_percentage == 0
    assert performance.overall_average(summaries) == 45


def test_legacy_results_match_by_name():
    roster = [_student(1, "Asha"), _student(2, "Ravi")]
    results = [_result(1, 70, student_name="Asha"), _result(2, 50, student_id=2, student_name="Asha")]
    asha, ravi = performance.summarize(results, roster)
    assert asha.total_exams == 1
    assert ravi.total_exams == 1


def test_top_performer_tie_keeps_first():
    roster = [_student(1, "Asha"), _student(2, "Ravi")]
    summaries = performance.summarize([_result(1, 75, 1), _result(2, 75, 2)], roster)
    assert performance.top_performer(summaries).id == 1


def test_empty_roster():
    result = performance.overview([], [])
    assert result.overall_average == 0
    assert result.top_performer is None


def test_record_result_ignores_client_percentage(store, make_student):
    student = make_student(name="Asha Patil", category="Junior College", course="Science")
    result = performance.record_result(store, ResultSubmit(
        student_id=student.id, exam_name=" Physics Unit 1 ", date=date(2024, 3, 10),
        marks=45, total_marks=50, percentage=12,
    ))

    assert result.percentage == 90.0
    assert result.student_name == "Asha Patil"
    assert result.student_category == "Junior College"
    assert result.exam_name == "Physics Unit 1"
    assert store.get("performance", result.result_id).percentage == 90.0


def test_record_result_for_walk_in_student(store):
    result = performance.record_result(store, ResultSubmit(
        student_name="Guest Learner", student_category="Entrance Exams",
        exam_name="Mock JEE", date=date(2024, 3, 10), marks=150, total_marks=300,
    ))
    assert result.student_id is None
    assert result.percentage == 50.0


def test_invalid_result_writes_nothing(store, make_student):
    student = make_student()
    base = dict(student_id=student.id, exam_name="Maths", date=date(2024, 3, 1), marks=10)

    with pytest.raises(InvalidTotalMarks):
        performance.record_result(store, ResultSubmit(total_marks=0, **base))
    with pytest.raises(MissingDate):
        performance.record_result(store, ResultSubmit(**{**base, "date": None}, total_marks=50))
    with pytest.raises(MissingField):
        performance.record_result(store, ResultSubmit(**{**base, "exam_name": "  "}, total_marks=50))
    with pytest.raises(MissingField):
        performance.record_result(store, ResultSubmit(exam_name="Maths", date=date(2024, 3, 1),
                                                      marks=10, total_marks=50))
    with pytest.raises(UnknownStudent):
        performance.record_result(store, ResultSubmit(**{**base, "student_id": 404}, total_marks=50))

    assert store.select_all("performance") == []


def test_edit_result_recomputes_percentage(store, make_student):
    student = make_student()
    result = performance.record_result(store, ResultSubmit(
        student_id=student.id, exam_name="Maths", date=date(2024, 3, 1), marks=30, total_marks=50))

    edited = performance.edit_result(store, result.result_id, ResultSubmit(
        student_id=student.id, exam_name="Maths", date=date(2024, 3, 1), marks=40, total_marks=50,
        percentage=1))
    assert edited.result_id == result.result_id
    assert edited.percentage == 80.0
    assert len(store.select_all("performance")) == 1


def test_unknown_result(store):
    with pytest.raises(UnknownResult):
        performance.get_result(store, 1)
    with pytest.raises(UnknownResult):
        performance.edit_result(store, 1, ResultSubmit(
            student_name="X", exam_name="Maths", date=date(2024, 3, 1), marks=1, total_marks=2))
