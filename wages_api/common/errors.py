# wages_api/common/errors.py
from sqlalchemy.exc import DataError, IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from wages_api.common.http import fail


class APIError(Exception):
    """Custom API Error class."""
    def __init__(self, code, message, status_code=400, payload=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.payload = payload


class _DomainError(APIError):
    default_code = "ERROR"
    default_status = 400

    def __init__(self, message, payload=None):
        super().__init__(self.default_code, message, self.default_status, payload)


class NotFound(_DomainError):
    """Referenced employee / wage / row is missing or invisible to the caller."""
    default_code = "NOT_FOUND"
    default_status = 404


class ValidationError(_DomainError):
    """Malformed input: bad date range, negative amount, unknown status."""
    default_code = "VALIDATION_ERROR"
    default_status = 422


class AuthorizationDenied(_DomainError):
    default_code = "FORBIDDEN"
    default_status = 403


class TransientStorageError(_DomainError):
    """Retryable I/O failure talking to the database."""
    default_code = "STORAGE_UNAVAILABLE"
    default_status = 503


class ConstraintViolation(_DomainError):
    default_code = "CONSTRAINT_VIOLATION"
    default_status = 409


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def _api_error(e: APIError):
        return fail(message=e.message, status=e.status_code, code=e.code, detail=e.payload)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(IntegrityError)
    def _integrity(e: IntegrityError):
        # 409 for unique/FK violations
        return fail("Conflict / integrity error", status=409, code="CONSTRAINT_VIOLATION",
                    detail=str(e.orig) if getattr(e, "orig", None) else str(e))

    @app.errorhandler(DataError)
    def _data(e: DataError):
        # value does not fit its column (numeric overflow, string too long)
        return fail("Value out of range", status=422, code="VALIDATION_ERROR",
                    detail=str(e.orig) if getattr(e, "orig", None) else str(e))

    @app.errorhandler(OperationalError)
    def _storage(e: OperationalError):
        app.logger.warning("storage unavailable: %s", e)
        return fail("Storage temporarily unavailable, retry later", status=503, code="STORAGE_UNAVAILABLE")

    @app.errorhandler(Exception)
    def _500(e: Exception):
        app.logger.exception(e)
        return fail("Internal server error", status=500)
