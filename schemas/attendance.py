from pydantic import BaseModel
from datetime import date as dt_date  # field below is also called "date"
from typing import Dict, List, Optional


class AttendanceMarkRecord(BaseModel):
    id: Optional[int] = None
    student_id: int
    date: dt_date
    status: Optional[str] = None

    class Config:
        from_attributes = True


# --- Marking session ---
class AttendanceItem(BaseModel):
    student_id: int
    status: str

class AttendanceSubmit(BaseModel):
    date: Optional[dt_date] = None
    category: Optional[str] = None      # None / "All" = whole roster
    attendance: List[AttendanceItem] = []


# --- View models ---
class AttendanceSummary(BaseModel):
    group: str
    present_count: int
    total_count: int
    percentage: int


class RegisterRow(BaseModel):
    student_id: int
    name: str
    category: Optional[str] = None
    days: Dict[str, str]                # ISO date -> status ("" outside the window)
    present: int
    absent: int
    late: int
    total: int
    percentage: int
