# ssrportal/errors.py
"""
Error taxonomy shared by services and controllers.

Services raise these; a single app-level handler renders them as
``{"error": <message>}`` with the matching HTTP status.
"""
from flask import jsonify, current_app


class PortalError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class Unauthorized(PortalError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(PortalError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PortalError):
    status_code = 404
    default_message = "Not Found"


class Conflict(PortalError):
    status_code = 409
    default_message = "Conflict"


class InternalError(PortalError):
    status_code = 500
    default_message = "Internal Server Error"


class FieldError(ValueError):
    """A single offending field: name, value and (optionally) the allowed range."""

    def __init__(self, field, message, value=None, minimum=None, maximum=None):
        self.field = field
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        self.message = message
        super().__init__(message)

    def to_dict(self):
        return {"field": self.field, "message": self.message}


class ValidationError(PortalError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors, message=None):
        self.errors = list(errors)
        if message is None:
            # single error: surface it directly so the form can show it as-is
            message = self.errors[0].message if len(self.errors) == 1 else self.default_message
        super().__init__(message)

    @property
    def fields(self):
        return [e.field for e in self.errors]

    def to_dict(self):
        return {"error": self.message, "details": [e.to_dict() for e in self.errors]}


def register_error_handlers(app):

    @app.errorhandler(PortalError)
    def handle_portal_error(err):
        if err.status_code >= 500:
            current_app.logger.error(f"{type(err).__name__}: {err.message}")
        return jsonify(err.to_dict()), err.status_code
