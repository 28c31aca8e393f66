class EventsError(Exception):
    """Base for errors that map onto a client-facing status code and message."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EventsError):
    status_code = 400


class AuthenticationError(EventsError):
    status_code = 401


class ForbiddenError(EventsError):
    status_code = 403


class NotFoundError(EventsError):
    status_code = 404


class ConflictError(EventsError):
    status_code = 409


class PayloadTooLargeError(EventsError):
    status_code = 413


class ThrottledError(EventsError):
    status_code = 429

    def __init__(self, message: str, retry_after_seconds: float):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds
