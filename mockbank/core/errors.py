"""
Service error taxonomy.

Every failure the mock engine reports to a caller is one of these. Each carries
a machine-checkable ``kind`` and the HTTP status the API layer maps it to.
"""
from typing import Any, Dict


class ServiceError(Exception):
    """Base class for structured service failures."""

    kind: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "type": self.kind,
            "status_code": self.status_code,
        }


class ValidationError(ServiceError):
    """Malformed or out-of-range input."""

    kind = "validation_error"
    status_code = 422


class NotFound(ServiceError):
    """A referenced exam, mock, submission or question does not exist."""

    kind = "not_found"
    status_code = 404


class Forbidden(ServiceError):
    """The caller does not own the resource."""

    kind = "forbidden"
    status_code = 403


class NoCandidates(ServiceError):
    """Filters matched zero questions."""

    kind = "no_candidates"
    status_code = 422


class ConfigurationError(ServiceError):
    """Content data problem: a gradable question is missing its answer key."""

    kind = "configuration_error"
    status_code = 500
