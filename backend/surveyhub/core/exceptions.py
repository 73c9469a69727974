"""Domain error hierarchy.

Every failure the services raise is a ``DomainError`` carrying a stable
``code`` and a ``kind``. The API layer maps ``kind`` to an HTTP status; the
submission engine copies ``code``/``kind`` into its structured result.
"""
from typing import List, Optional


class ErrorKind:
    NOT_FOUND = "not_found"
    STATE_CONFLICT = "state_conflict"
    VALIDATION = "validation"
    TRANSIENT = "transient"


class DomainError(Exception):
    kind = ErrorKind.STATE_CONFLICT
    code = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── Not found ────────────────────────────────────────────────────────

class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    code = "not_found"


class SurveyNotFoundError(NotFoundError):
    code = "survey_not_found"

    def __init__(self, survey_id: int):
        super().__init__(f"Survey with ID {survey_id} was not found")
        self.survey_id = survey_id


class PublicationNotFoundError(NotFoundError):
    code = "publication_not_found"

    def __init__(self, publication_id: int):
        super().__init__(f"Publication with ID {publication_id} was not found")
        self.publication_id = publication_id


class RespondentNotFoundError(NotFoundError):
    code = "respondent_not_found"

    def __init__(self, respondent_id: int):
        super().__init__(f"Respondent with ID {respondent_id} was not found")
        self.respondent_id = respondent_id


class QuestionNotFoundError(NotFoundError):
    code = "question_not_found"

    def __init__(self, question_id: int):
        super().__init__(f"Question with ID {question_id} was not found")
        self.question_id = question_id


class ScaleNotFoundError(NotFoundError):
    code = "scale_not_found"

    def __init__(self, scale_id: int):
        super().__init__(f"Scale with ID {scale_id} was not found")
        self.scale_id = scale_id


# ── State conflicts ──────────────────────────────────────────────────

class StateConflictError(DomainError):
    kind = ErrorKind.STATE_CONFLICT
    code = "state_conflict"


class InvalidStateError(StateConflictError):
    code = "invalid_state"


class AlreadyClosedError(StateConflictError):
    code = "already_closed"

    def __init__(self, publication_id: int):
        super().__init__(f"Publication {publication_id} is already closed")
        self.publication_id = publication_id


class PublicationClosedError(StateConflictError):
    code = "publication_closed"

    def __init__(self, publication_id: int):
        super().__init__(f"Publication {publication_id} is closed and cannot accept responses")
        self.publication_id = publication_id


class ScaleInUseError(StateConflictError):
    code = "scale_in_use"

    def __init__(self, scale_id: int, reason: str = "cannot be deleted"):
        super().__init__(f"Scale with ID {scale_id} is in use and {reason}")
        self.scale_id = scale_id


class TenantMismatchError(StateConflictError):
    code = "tenant_mismatch"


# ── Validation ───────────────────────────────────────────────────────

class CatalogValidationError(DomainError):
    """Invalid catalog input (blank titles, bad choices, ...)."""
    kind = ErrorKind.VALIDATION
    code = "validation_failed"

    def __init__(self, errors, message: str = "Validation failed"):
        if isinstance(errors, str):
            errors = [errors]
        super().__init__(message)
        self.errors: List[str] = list(errors)


# ── Transient store failures ─────────────────────────────────────────

class TransientStoreError(DomainError):
    kind = ErrorKind.TRANSIENT
    code = "transient_store_failure"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
