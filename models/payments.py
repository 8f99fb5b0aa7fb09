"""
Payments Ledger - append-only.
A student's paid_fee is the sum of their Completed payments.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
import datetime


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)

    amount = Column(Float, nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String(50), default="Cash")  # Cash, UPI, Card, Bank Transfer, Cheque
    status = Column(String(20), default="Completed")     # Completed, Pending, Failed, Refunded
    description = Column(String(500), nullable=True)

    # Audit Trail
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    student = relationship("models.students.Student")
