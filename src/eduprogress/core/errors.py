"""Error taxonomy shared by the engines and the web layer.

Every exception carries the HTTP status it maps to at the API boundary.
Messages are safe to show to callers; storage details never end up here.
"""

from __future__ import annotations


class ProgressError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ProgressError):
    """Missing or invalid input."""

    status_code = 400


class PermissionDeniedError(ProgressError):
    """Caller is authenticated but not allowed to act on the resource."""

    status_code = 403


class NotFoundError(ProgressError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(ProgressError):
    """Uniqueness or state-transition conflict."""

    status_code = 409


class StorageError(ProgressError):
    """Unexpected failure inside the store."""

    status_code = 500


class ExamNotFoundError(NotFoundError):
    pass


class AttemptNotFoundError(NotFoundError):
    pass


class QuestionNotFoundError(NotFoundError):
    pass


class AttemptOwnershipError(PermissionDeniedError):
    pass


class AttemptAlreadyCompletedError(ConflictError):
    pass


class OpenAttemptExistsError(ConflictError):
    pass
