"""
Domain errors raised by the service layer and rendered by the app handlers
"""


class CareerHubError(Exception):
    """Base error carrying the HTTP status it maps to"""

    status_code = 500
    error = "server_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(CareerHubError):
    """A course, lesson, quiz, progress record or certificate is missing"""

    status_code = 404
    error = "not_found"


class PreconditionError(CareerHubError):
    """The request is well formed but the current state does not allow it"""

    status_code = 400
    error = "precondition_failed"


class ForbiddenError(CareerHubError):
    """The caller may not access this resource"""

    status_code = 403
    error = "forbidden"
