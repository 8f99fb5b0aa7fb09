from .students import Student
from .attendance import AttendanceMark
from .payments import Payment
from .performance import ExamResult
__all__ = ["Student", "AttendanceMark", "Payment", "ExamResult"]
