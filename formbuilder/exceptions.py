"""
Error taxonomy shared by the storage gateway and the HTTP layer.

Each exception carries the HTTP status it maps to; ``formbuilder.main``
registers the handlers that turn them into responses.
"""
from typing import Dict, List, Optional


class FormBuilderException(Exception):
    """Base exception for all domain errors."""
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(message)


class ClientError(FormBuilderException):
    """Raised when a payload is well-formed JSON but semantically invalid."""
    status_code = 400

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        super().__init__("Validation failed")

    @classmethod
    def for_field(cls, field: str, message: str) -> "ClientError":
        return cls([{"field": field, "message": message}])


class UnauthorizedException(FormBuilderException):
    """Raised when a request carries no valid identity."""
    status_code = 401

    def __init__(self):
        super().__init__("Unauthorized")


class ForbiddenException(FormBuilderException):
    """Raised when the caller does not own the target form."""
    status_code = 403

    def __init__(self):
        super().__init__("Forbidden")


class NotFoundException(FormBuilderException):
    """Raised when an entity does not exist or is not visible to the caller."""
    status_code = 404

    def __init__(self, entity: str, identifier: Optional[object] = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found")


class ConflictException(FormBuilderException):
    """Raised when a uniqueness rule would be violated."""
    status_code = 409


def client_error_from_validation(errors: List[dict], prefix: tuple = ()) -> ClientError:
    """Builds a ClientError from pydantic-style error dicts (``loc``/``msg``)."""
    return ClientError([
        {
            "field": ".".join(str(part) for part in (*prefix, *error.get("loc", ()))),
            "message": error.get("msg", "Invalid value"),
        }
        for error in errors
    ])
