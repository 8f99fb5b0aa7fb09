from pydantic import BaseModel
from datetime import date, datetime
from typing import Dict, Optional, Union


class PaymentRecord(BaseModel):
    id: int
    student_id: int
    amount: float
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    status: Optional[str] = "Completed"
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentRequest(BaseModel):
    student_id: int
    # Form input, validated by the reconciler
    amount: Optional[Union[float, str]] = None
    payment_date: Optional[date] = None
    payment_method: str = "Cash"
    description: Optional[str] = None


class FeeSummary(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    course: Optional[str] = None
    total_amount: float
    amount_paid: float
    amount_due: float
    status: str
    last_payment_date: Optional[date] = None
    overpaid: bool = False


class FeeOverview(BaseModel):
    total_fees: float
    total_collected: float
    total_pending: float
    collected_pct: int
    pending_pct: int
    status_counts: Dict[str, int]


class Reconciliation(BaseModel):
    """Outcome of recomputing a student's cached fee fields from the ledger."""
    student_id: int
    paid_fee: float
    due_amount: float
    fee_status: str
    last_payment_date: Optional[date] = None
    overpaid: bool = False
    payment_id: Optional[int] = None

    def student_fields(self) -> dict:
        # Column set persisted on the student row
        return {
            "paid_fee": self.paid_fee,
            "due_amount": self.due_amount,
            "fee_status": self.fee_status,
            "last_payment": self.last_payment_date,
        }
