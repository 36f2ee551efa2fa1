"""
Forum error taxonomy.

Services raise these; the application maps them to HTTP responses
(HTML error page for pages, JSON body for the API).
"""


class ForumError(Exception):
    """Base error for forum operations."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ForumError):
    """User-correctable input error, shown inline next to the field."""

    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(ForumError):
    """Identifier did not resolve to a stored entity."""

    status_code = 404

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier
