from __future__ import annotations


class LedgerError(Exception):
    """Base for every precondition or input failure raised by the ledger.

    Failures are raised before any state is touched, so a caller that catches
    one can keep using the ledger as if the call never happened.
    """

    error_code = "ledger_error"
    status_code = 400
    message = "ledger operation failed"

    def __init__(self, message: str | None = None, **context):
        self.context = context
        super().__init__(message or self.message)

    @property
    def error_message(self) -> str:
        return str(self.args[0]) if self.args else self.message


class AlreadyEnrolled(LedgerError):
    error_code = "already_enrolled"
    status_code = 409
    message = "account is already enrolled"


class NotEnrolled(LedgerError):
    error_code = "not_enrolled"
    status_code = 403
    message = "account is not enrolled"


class UnknownModule(LedgerError):
    error_code = "unknown_module"
    status_code = 404
    message = "module not found"


class UnknownLesson(LedgerError):
    error_code = "unknown_lesson"
    status_code = 404
    message = "lesson not found"


class ModuleInactive(LedgerError):
    error_code = "module_inactive"
    status_code = 409
    message = "module is not active"


class CapacityExceeded(LedgerError):
    error_code = "capacity_exceeded"
    status_code = 409
    message = "module catalog is full"


class InvalidLessonCount(LedgerError):
    error_code = "invalid_lesson_count"
    status_code = 422
    message = "lesson count must be between 1 and 255"


class NotAdministrator(LedgerError):
    error_code = "not_administrator"
    status_code = 403
    message = "caller is not an administrator"
