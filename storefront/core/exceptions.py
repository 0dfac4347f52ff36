from sqlalchemy.exc import DisconnectionError, IntegrityError, InterfaceError, OperationalError


class ServiceError(Exception):
    """Base exception for service-level errors."""

    error_type = "ServiceError"


class ValidationError(ServiceError):
    error_type = "ValidationError"

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidSortError(ValidationError):
    error_type = "InvalidSort"


class NotFoundError(ServiceError):
    error_type = "NotFound"


class ConstraintViolationError(ServiceError):
    error_type = "ConstraintViolation"


class ConflictError(ConstraintViolationError):
    pass


class ConnectivityError(ServiceError):
    error_type = "ConnectivityError"


def classify_db_error(exc: Exception) -> ServiceError | None:
    """Translate a SQLAlchemy failure into the service taxonomy, or None if it has no mapping."""

    if isinstance(exc, IntegrityError):
        return ConstraintViolationError(str(exc.orig) if exc.orig is not None else str(exc))
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError)):
        return ConnectivityError("Database is unavailable")
    return None
