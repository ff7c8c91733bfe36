"""
Error taxonomy shared by the services and the HTTP layer.
Each error carries the client-facing message and the status code it maps to.
"""


class SwiftGateError(Exception):
    """Base class for errors that are reported to the caller."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SwiftGateError):
    """Input did not match the expected format."""
    status_code = 400


class BadCredentials(SwiftGateError):
    status_code = 401


class InvalidToken(SwiftGateError):
    """Bearer token missing, malformed, mis-signed or expired."""
    status_code = 401


class Forbidden(SwiftGateError):
    """Valid token, wrong role."""
    status_code = 403


class NotFound(SwiftGateError):
    status_code = 404


class PersistenceError(SwiftGateError):
    """The document store rejected or failed an operation."""
    status_code = 500
