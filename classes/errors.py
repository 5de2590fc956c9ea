class LMSError(Exception):
    """Base class for errors a route hands back to the caller as its response."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, error=None, message=None, **extra):
        super().__init__(error or self.error)
        if error:
            self.error = error
        self.message = message
        self.extra = extra

    def to_dict(self):
        payload = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        payload.update(self.extra)
        return payload


class ValidationError(LMSError):
    status_code = 400
    error = "Invalid input"


class NotFoundError(LMSError):
    status_code = 404
    error = "Not found"


class ForbiddenError(LMSError):
    status_code = 403
    error = "Forbidden"


class ConflictError(LMSError):
    status_code = 409
    error = "Conflict"
