"""
Error taxonomy shared by the services and the API layer.

ValidationError  - bad user input, shown inline, not a system fault
NotFoundError    - referenced student/result does not exist
StoreError       - the database call itself failed; nothing was committed
"""


class AppError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# =====================
# VALIDATION
# =====================

class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"


class InvalidAmount(ValidationError):
    default_message = "Please enter a valid payment amount."


class MissingDate(ValidationError):
    default_message = "Please select a date."


class InvalidMarks(ValidationError):
    default_message = "Please enter valid obtained marks."


class InvalidTotalMarks(ValidationError):
    default_message = "Please enter valid total marks."


class InvalidStatus(ValidationError):
    default_message = "Attendance status must be Present, Absent or Late."


class InvalidInstallments(ValidationError):
    default_message = "Installments must be between 1 and 24."


class InvalidCategory(ValidationError):
    default_message = "Unknown category."


class MissingField(ValidationError):
    default_message = "Please fill in all required fields."


# =====================
# NOT FOUND
# =====================

class NotFoundError(AppError):
    status_code = 404
    default_message = "Record not found"


class UnknownStudent(NotFoundError):
    default_message = "Student not found"


class UnknownResult(NotFoundError):
    default_message = "Result not found"


# =====================
# STORE
# =====================

class StoreError(AppError):
    status_code = 500
    default_message = "Database error"
