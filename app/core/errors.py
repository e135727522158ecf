"""
Exception hierarchy for the content studio backend.

Every domain error derives from ContentStudioError and carries:
- message: human-readable description (safe to show to a trainer)
- error_code: machine-readable string (e.g. "TOPIC_ID_REQUIRED")
- status_code: HTTP status the routers translate it to
- context: optional structured metadata
"""

from typing import Any, Dict, List, Optional


class ContentStudioError(Exception):
    """Base exception for all content studio domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        super().__init__(message)


class PreconditionError(ContentStudioError):
    """A required input is missing; the operation aborts before doing any work."""

    def __init__(
        self,
        message: str,
        error_code: str = "PRECONDITION_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=400, context=context)


class NotFoundError(ContentStudioError):
    def __init__(
        self,
        message: str,
        error_code: str = "NOT_FOUND",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=404, context=context)


class GenerationError(ContentStudioError):
    """The generation collaborator failed for one format."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERATION_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)


class GenerationTimeoutError(GenerationError):
    def __init__(self, format_name: str, timeout_seconds: float):
        self.format_name = format_name
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Generation of '{format_name}' timed out after {timeout_seconds:g} seconds",
            error_code="GENERATION_TIMEOUT",
            context={"format": format_name, "timeout_seconds": timeout_seconds},
        )
        self.status_code = 504


class PersistenceError(ContentStudioError):
    """Writing generated content to the relational store failed."""

    def __init__(
        self,
        message: str,
        error_code: str = "PERSISTENCE_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)


class StorageError(ContentStudioError):
    def __init__(
        self,
        message: str,
        error_code: str = "STORAGE_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)


class PublicationValidationFailed(ContentStudioError):
    """The course or lesson is not ready; ``issues`` lists every blocking problem."""

    def __init__(self, message: str, issues: List[Any], error_code: str = "COURSE_NOT_READY"):
        self.issues = list(issues)
        super().__init__(
            message,
            error_code=error_code,
            status_code=422,
            context={"issue_count": len(self.issues)},
        )


class TransferError(ContentStudioError):
    """The downstream publishing service could not receive the course."""

    def __init__(
        self,
        message: str,
        error_code: str = "TRANSFER_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=502, context=context)
