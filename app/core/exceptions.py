"""
Application error taxonomy.

Services raise these; ``app.main`` maps each class to an HTTP status code and
renders ``{"message": ..., "errors": ...}``.
"""
from typing import Dict, List, Optional


class ApiError(Exception):
    """Base class for errors surfaced directly to the API caller"""

    status_code = 500

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        self.message = message
        self.errors = errors
        super().__init__(message)


class ValidationError(ApiError):
    """422 Unprocessable Entity"""

    status_code = 422

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors={field: [message]})


class Unauthenticated(ApiError):
    """401 Unauthorized"""

    status_code = 401

    def __init__(self, message: str = "Unauthenticated."):
        super().__init__(message)


class Forbidden(ApiError):
    """403 Forbidden"""

    status_code = 403

    def __init__(self, message: str = "This action is unauthorized."):
        super().__init__(message)


class NotFound(ApiError):
    """404 Not Found"""

    status_code = 404
