"""
Domain error hierarchy.

Services raise these; app.main translates them into the standard error
envelope  {"error": {"code": ..., "message": ...}}  with the status code
carried by the class.
"""


class AppError(Exception):
    """Base class for errors that map onto a client-facing status code."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(AppError):
    """A referenced movie, review, user or collection entry does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    """A uniqueness rule would be violated."""

    status_code = 409
    code = "CONFLICT"


class ValidationError(AppError):
    """Malformed or out-of-range input that got past schema validation."""

    status_code = 400
    code = "VALIDATION_ERROR"


class BusinessRuleError(AppError):
    """The request is well-formed but not allowed in the current state."""

    status_code = 400
    code = "BUSINESS_RULE_VIOLATION"


def error_body(code: str, message: str) -> dict:
    """Standard error envelope."""
    return {"error": {"code": code, "message": message}}
