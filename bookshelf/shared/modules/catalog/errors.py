"""
Catalog error taxonomy.

Every error carries a machine-readable code and the HTTP status the
controllers answer with, so callers never have to map exception types
themselves.
"""


class CatalogError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(CatalogError):
    """Malformed, empty or out-of-range input. Raised before any write."""
    code = "BAD_REQUEST"
    status_code = 400


class NotFoundError(CatalogError):
    """A referenced Author or Book does not exist in the primary store."""
    code = "NOT_FOUND"
    status_code = 404


class InternalError(CatalogError):
    """The primary store acknowledged nothing, or an expected mutation changed nothing."""
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
