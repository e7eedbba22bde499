"""Core exceptions raised by the risk intelligence engine."""

from vendoriq.utils.exceptions import VendorIQError


class EntityNotFoundError(VendorIQError):
    """Raised when a subject or entity does not exist in the repository.

    Attributes:
        entity_type: Kind of entity that was looked up (e.g., "vendor")
        entity_id: Identifier that was not found
    """

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type.capitalize()} not found: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"EntityNotFoundError: {self.args[0]}"


class RepositoryUnavailableError(VendorIQError):
    """Raised when a repository read or write fails after its retry.

    Attributes:
        operation: Repository method that failed
        reason: Short description of the last failure
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(f"Repository unavailable during {operation}: {reason}")
        self.operation = operation
        self.reason = reason

    def __str__(self) -> str:
        return f"RepositoryUnavailableError: {self.args[0]}"


class InputValidationError(VendorIQError):
    """Raised when engine input is malformed.

    Rejected before any repository access.

    Attributes:
        field: Name of the offending input, if known
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def __str__(self) -> str:
        if self.field:
            return f"InputValidationError({self.field}): {self.args[0]}"
        return f"InputValidationError: {self.args[0]}"
