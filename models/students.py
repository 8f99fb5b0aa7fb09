from sqlalchemy import Column, Integer, String, Date, Boolean, Float
import datetime

from database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)

    # --- ENROLLMENT TRACK ---
    category = Column(String(50), index=True)   # School, Junior College, Diploma...
    course = Column(String(100))                # e.g. "CBSE 10th", "Diploma - 2nd Year"
    enrollment_date = Column(Date, default=datetime.date.today)

    # --- CONTACT ---
    email = Column(String(150), nullable=True)
    phone = Column(String(20), nullable=True)

    # --- FEE SNAPSHOT (cached from the payments ledger) ---
    total_fee = Column(Float, default=0.0)
    paid_fee = Column(Float, default=0.0)
    due_amount = Column(Float, default=0.0)
    fee_status = Column(String(20), default="Unpaid")  # Paid / Partial / Unpaid
    last_payment = Column(Date, nullable=True)
    installments = Column(Integer, nullable=True)
    installment_amt = Column(Float, nullable=True)

    # Soft lifecycle, rows are never deleted
    is_active = Column(Boolean, default=True)
