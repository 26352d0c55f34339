"""
Service-layer exception hierarchy.

Services raise these types; blueprints register handlers against them
once and get consistent HTTP status codes everywhere.

Usage:
    from loto.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Procedure", resource_id="3f2a...")
    raise ValidationError("Invalid form name", details={"form_name": "..."})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable model/entity name (e.g. "Procedure", "Source").
        resource_id: The id that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input is well-formed but violates a form rule.

    Maps to HTTP 422 in blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
                 Keys are field names; values are error descriptions.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class SourceLimitError(ValidationError):
    """Raised when a procedure already holds the maximum number of sources."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(
            f"A procedure can hold at most {limit} sources",
            details={"sources": f"maximum is {limit}"},
        )


class PersistenceError(Exception):
    """Raised when a session commit fails and has been rolled back.

    Maps to HTTP 500. The original driver exception is chained.
    """

    def __init__(self, action: str = "commit") -> None:
        self.action = action
        super().__init__(f"Database error during {action}")
