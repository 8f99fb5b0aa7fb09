"""
Fee Router - ledger-backed collection
Every payment is appended to the ledger and the student's cached fee
fields are recomputed from it.
"""
from fastapi import APIRouter, Depends

from routers.deps import get_store
from schemas.fees import PaymentRequest
from services import fees as fee_service
from services import students as student_service

router = APIRouter(prefix="/api/v1/fees", tags=["Fees"])


# =====================
# FEE SUMMARY
# =====================

@router.get("/")
def get_fee_summary(status: str = "All", search: str = "", category: str = "All", store=Depends(get_store)):
    """Per-student fee rows plus the totals cards"""
    students = student_service.active_roster(store)
    summaries = [fee_service.summarize_student(s) for s in students]
    overview = fee_service.fee_overview(summaries)

    term = search.strip().lower()
    rows = [
        s for s in summaries
        if (status == "All" or s.status == status)
        and (category == "All" or s.category == category)
        and (not term or term in s.name.lower() or term in (s.category or "").lower())
    ]
    return {"overview": overview, "fees": rows}


# =====================
# PAYMENT COLLECTION
# =====================

@router.post("/collect")
def collect_fee(pay: PaymentRequest, store=Depends(get_store)):
    outcome = fee_service.record_payment(store, pay)
    return {
        "message": "Payment Successful",
        "payment_id": outcome.payment_id,
        "paid_fee": outcome.paid_fee,
        "due_amount": outcome.due_amount,
        "fee_status": outcome.fee_status,
        "last_payment_date": outcome.last_payment_date,
        "overpaid": outcome.overpaid,
    }


@router.post("/reconcile/{student_id}")
def reconcile(student_id: int, store=Depends(get_store)):
    """Rebuild cached fee fields from the ledger"""
    return fee_service.reconcile_student(store, student_id)


# =====================
# HISTORY
# =====================

@router.get("/history/{student_id}")
def get_student_history(student_id: int, store=Depends(get_store)):
    return fee_service.payment_history(store, student_id)


@router.get("/methods")
def get_payment_methods():
    return {"methods": fee_service.PAYMENT_METHODS, "statuses": fee_service.PAYMENT_STATUSES}
