from pydantic import BaseModel, field_validator
from datetime import date
from typing import Optional


# 1. Row shape read back from the students table
class StudentRecord(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    course: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    enrollment_date: Optional[date] = None
    total_fee: float = 0.0
    paid_fee: float = 0.0
    due_amount: float = 0.0
    fee_status: str = "Unpaid"
    last_payment: Optional[date] = None
    installments: Optional[int] = None
    installment_amt: Optional[float] = None
    is_active: bool = True

    class Config:
        from_attributes = True

    # Older rows have NULLs in the fee columns
    @field_validator("total_fee", "paid_fee", "due_amount", mode="before")
    @classmethod
    def _none_as_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("fee_status", mode="before")
    @classmethod
    def _none_as_unpaid(cls, v):
        return v or "Unpaid"

    @field_validator("is_active", mode="before")
    @classmethod
    def _none_as_active(cls, v):
        return True if v is None else v


# 2. Enrollment form
class StudentCreate(BaseModel):
    name: str
    category: str = "School"
    course: str
    email: str
    phone: str
    enrollment_date: Optional[date] = None
    total_fee: float = 0.0
    paid_fee: float = 0.0          # Amount collected at the desk on enrollment
    payment_method: str = "Cash"
    installments: Optional[int] = None


# 3. Edit form (only the fields sent are changed)
class StudentUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    course: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    total_fee: Optional[float] = None
    installments: Optional[int] = None          # explicit null removes the plan
