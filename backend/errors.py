from typing import Any, Dict, List, Optional, Union

Details = Union[Dict[str, Any], List[Any]]


class AppError(Exception):
    """Base exception; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Details] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(AppError):
    """Entity absent: product, account, or a query with zero matches"""

    status_code = 404


class ValidationError(AppError):
    """Malformed or out-of-range input"""

    status_code = 422


class CapacityError(AppError):
    """A size-capped list is already full"""

    status_code = 409


class ConflictError(AppError):
    """Unique key already taken (username, email, product url)"""

    status_code = 409


class AuthError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class UpstreamError(AppError):
    """Store or notifier failure"""

    status_code = 503
