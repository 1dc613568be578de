"""
Typed errors raised by services and guards.

Each one knows its HTTP status; the handlers in main turn them into
``{"message": ..., "error": ...}`` bodies.
"""


class AppError(Exception):
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AppError):
    status_code = 400
    error = "Bad Request"


class UnauthorizedError(AppError):
    status_code = 401
    error = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    error = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    error = "Not Found"
