# /app/utils/exceptions.py


class ServiceError(Exception):
    """Base class for failures raised by the service layer.

    Carries a user-facing message and the HTTP status it maps to. Details
    that should not reach the caller belong in the log, not in ``message``.
    """
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = 'Invalid request data'


class IndexOutOfRangeError(ServiceError):
    status_code = 400
    default_message = 'Invalid clinical entry index'


class NotFoundError(ServiceError):
    status_code = 404
    default_message = 'Resource not found'


class ConflictError(ServiceError):
    status_code = 409
    default_message = 'Conflicting update, reload and try again'


class StoreUnavailableError(ServiceError):
    status_code = 500
    default_message = 'Internal server error'
