from sqlalchemy import Column, Integer, String, ForeignKey, Float, Date
from sqlalchemy.orm import relationship
from database import Base

class ExamResult(Base):
    __tablename__ = "performance"

    result_id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=True, index=True)

    # Denormalized copies, older rows only carry these
    student_name = Column(String(100), index=True)
    student_category = Column(String(50))

    exam_name = Column(String(150))   # Example: "Physics Unit Test 2"
    date = Column(Date)
    marks = Column(Float)             # Example: 45
    total_marks = Column(Float)       # Example: 50
    percentage = Column(Float)        # Always marks / total_marks * 100, set on write

    student = relationship("models.students.Student")
