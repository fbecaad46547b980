"""Domain-specific exceptions, framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class ClientValidationError(Exception):
    """Raised when client fields fail the form-level validation rules."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid client data")


class DocumentParseError(Exception):
    """Signals that a stored root document blob could not be decoded.

    Never raised past the document store: the loader keeps it as a value
    and falls back to a fresh default document.
    """

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Stored document '{key}' is unreadable: {reason}")
