from pydantic import BaseModel, field_validator
from datetime import date as dt_date  # field below is also called "date"
from typing import List, Optional


class ExamResultRecord(BaseModel):
    result_id: int
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    student_category: Optional[str] = None
    exam_name: Optional[str] = None
    date: Optional[dt_date] = None
    marks: float = 0.0
    total_marks: float = 0.0
    percentage: float = 0.0

    class Config:
        from_attributes = True

    @field_validator("marks", "total_marks", "percentage", mode="before")
    @classmethod
    def _none_as_zero(cls, v):
        return 0.0 if v is None else v


class ResultSubmit(BaseModel):
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    student_category: Optional[str] = None
    exam_name: Optional[str] = None
    date: Optional[dt_date] = None
    marks: Optional[float] = None
    total_marks: Optional[float] = None
    # Accepted so old clients don't break, never stored
    percentage: Optional[float] = None


class PerformanceSummary(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    course: Optional[str] = None
    total_exams: int
    avg_percentage: int
    highest_percentage: float
    lowest_percentage: float


class PerformanceOverview(BaseModel):
    summaries: List[PerformanceSummary]
    overall_average: int
    top_performer: Optional[PerformanceSummary] = None
