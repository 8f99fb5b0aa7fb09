"""
Fee reconciliation.

The payments ledger is the source of truth. A student's paid_fee,
due_amount, fee_status and last_payment are a cached copy of it and are
always rewritten together from a fresh read of the full ledger.
"""
import logging
import math
from datetime import date
from typing import Iterable, List, Optional

from errors import InvalidAmount, InvalidInstallments, MissingDate, UnknownStudent, ValidationError
from schemas.fees import FeeOverview, FeeSummary, PaymentRecord, PaymentRequest, Reconciliation
from schemas.students import StudentRecord
from utils.helpers import round_half_up, round_money

logger = logging.getLogger(__name__)

FEE_STATUSES = ["Paid", "Partial", "Unpaid"]
PAYMENT_METHODS = ["Cash", "UPI", "Card", "Bank Transfer", "Cheque"]
PAYMENT_STATUSES = ["Completed", "Pending", "Failed", "Refunded"]
MAX_INSTALLMENTS = 24


# =====================
# PURE RULES
# =====================

def fee_status(total_fee, paid_fee) -> str:
    total = total_fee or 0
    paid = paid_fee or 0
    if total > 0 and paid >= total:
        return "Paid"
    if 0 < paid < total:
        return "Partial"
    return "Unpaid"


def due_amount(total_fee, paid_fee) -> float:
    """Outstanding amount, floored at zero. An overshoot stays in paid_fee."""
    return max(round_money((total_fee or 0) - (paid_fee or 0)), 0.0)


def installment_amount(total_fee, installments) -> Optional[float]:
    if installments is None:
        return None
    if isinstance(installments, bool) or not isinstance(installments, int) \
            or not 1 <= installments <= MAX_INSTALLMENTS:
        raise InvalidInstallments()
    return round_money((total_fee or 0) / installments)


def validate_amount(value) -> float:
    """Positive, finite number or InvalidAmount."""
    if value is None or isinstance(value, bool):
        raise InvalidAmount()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidAmount()
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmount()
    return amount


def normalize_method(method) -> str:
    if not method:
        return "Cash"
    for known in PAYMENT_METHODS:
        if known.lower() == str(method).strip().lower():
            return known
    raise ValidationError(f"Unknown payment method '{method}'")


def counts_toward_paid(payment) -> bool:
    # Legacy rows have no status, they were all completed payments
    return (payment.status or "Completed").lower() == "completed"


def reconcile_from_ledger(student_id: int, total_fee, payments: Iterable[PaymentRecord]) -> Reconciliation:
    completed = [p for p in payments if counts_toward_paid(p)]
    paid = round_money(sum(p.amount or 0 for p in completed))
    dates = [p.payment_date for p in completed if p.payment_date is not None]
    return Reconciliation(
        student_id=student_id,
        paid_fee=paid,
        due_amount=due_amount(total_fee, paid),
        fee_status=fee_status(total_fee, paid),
        last_payment_date=max(dates) if dates else None,
        overpaid=paid > (total_fee or 0),
    )


def summarize_student(student: StudentRecord) -> FeeSummary:
    total = student.total_fee or 0
    paid = student.paid_fee or 0
    return FeeSummary(
        id=student.id,
        name=student.name,
        category=student.category,
        course=student.course,
        total_amount=total,
        amount_paid=paid,
        amount_due=due_amount(total, paid),
        status=fee_status(total, paid),
        last_payment_date=student.last_payment,
        overpaid=paid > total,
    )


def fee_overview(summaries: List[FeeSummary]) -> FeeOverview:
    total_fees = round_money(sum(s.total_amount for s in summaries))
    collected = round_money(sum(s.amount_paid for s in summaries))
    pending = round_money(sum(s.amount_due for s in summaries))

    def pct(part):
        return round_half_up(part / total_fees * 100) if total_fees > 0 else 0

    counts = {status: 0 for status in FEE_STATUSES}
    for s in summaries:
        counts[s.status] = counts.get(s.status, 0) + 1

    return FeeOverview(
        total_fees=total_fees,
        total_collected=collected,
        total_pending=pending,
        collected_pct=pct(collected),
        pending_pct=pct(pending),
        status_counts=counts,
    )


# =====================
# STORE OPERATIONS
# =====================

def _load_student(store, student_id) -> StudentRecord:
    student = store.get("students", student_id)
    if student is None:
        raise UnknownStudent(f"Student {student_id} not found")
    return student


def _persist_reconciliation(store, student: StudentRecord) -> Reconciliation:
    # Full ledger re-read; a value captured before the insert could be stale
    ledger = store.select_filtered("payments", {"student_id": student.id})
    outcome = reconcile_from_ledger(student.id, student.total_fee, ledger)
    store.update("students", student.id, outcome.student_fields())
    if outcome.overpaid:
        logger.warning(
            "Student %s overpaid: paid %.2f against total fee %.2f",
            student.id, outcome.paid_fee, student.total_fee or 0,
        )
    return outcome


def reconcile_student(store, student_id: int) -> Reconciliation:
    with store.transaction():
        student = _load_student(store, student_id)
        return _persist_reconciliation(store, student)


def record_payment(store, request: PaymentRequest) -> Reconciliation:
    """Insert a payment and rewrite the student's cached fee fields.

    Both writes happen in one store transaction; if either fails neither
    is kept. Raises InvalidAmount, MissingDate or UnknownStudent.
    """
    amount = validate_amount(request.amount)
    if request.payment_date is None:
        raise MissingDate("Please select a payment date.")
    method = normalize_method(request.payment_method)

    with store.transaction():
        student = _load_student(store, request.student_id)
        payment_id = store.insert("payments", {
            "student_id": student.id,
            "amount": round_money(amount),
            "payment_date": request.payment_date,
            "payment_method": method,
            "status": "Completed",
            "description": (request.description or "").strip() or None,
        })
        outcome = _persist_reconciliation(store, student)

    outcome.payment_id = payment_id
    logger.info(
        "Recorded payment %s of %.2f for student %s (paid %.2f, due %.2f, %s)",
        payment_id, amount, student.id, outcome.paid_fee, outcome.due_amount, outcome.fee_status,
    )
    return outcome


def payment_history(store, student_id: int) -> List[PaymentRecord]:
    _load_student(store, student_id)
    payments = store.select_filtered("payments", {"student_id": student_id})
    return sorted(payments, key=lambda p: (p.payment_date or date.min, p.id), reverse=True)
