"""
Error taxonomy.

Repository code raises ``EntityConflictError`` when the database rejects a
write on a uniqueness constraint.  Service code raises ``ServiceError``
subclasses built from a ``ServiceErrorCode``; ``newsdesk.main`` maps them to
HTTP responses.
"""
from enum import Enum


class ServiceErrorCode(Enum):
    NEWS_ID_DOES_NOT_EXIST = ("000001", "News with id %s does not exist.")
    TAG_NAME_DOES_NOT_EXIST = ("000002", "Tag with name '%s' does not exist.")
    NEWS_CONFLICT = ("000003", "News with the same unique fields already exists.")

    def __init__(self, error_code: str, message: str) -> None:
        self.error_code = error_code
        self.message = message


# ---------------------------------------------------------------------------
# Repository layer
# ---------------------------------------------------------------------------

class EntityConflictError(Exception):
    """A flush violated a unique (or other integrity) constraint."""


# ---------------------------------------------------------------------------
# Service layer
# ---------------------------------------------------------------------------

class ServiceError(Exception):
    def __init__(self, message: str, error_code: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details

    @classmethod
    def from_code(cls, code: ServiceErrorCode, *args, details: str | None = None) -> "ServiceError":
        message = code.message % args if args else code.message
        return cls(message, code.error_code, details)

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ServiceError):
    pass


class ResourceConflictError(ServiceError):
    pass
