"""
Domain-specific errors for the network bounded context.

Only errors the connector (or a local registry adapter) raises itself
are defined here. Failures reported by ledger collaborators pass through
unchanged so their original diagnostics survive.
These are mapped to HTTP responses at the interface layer.
"""


class NetworkConnectorError(Exception):
    """Base error for all network connector errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class UnsupportedTypeError(NetworkConnectorError):
    """Raised when a declaration is not an asset, participant or transaction."""

    def __init__(self, type_name: str, operation: str | None = None) -> None:
        message = f"Unable to handle resource of type: {type_name}"
        if operation:
            message = f"{message} (operation: {operation})"
        super().__init__(message)
        self.type_name = type_name
        self.operation = operation


class ModelNotFoundError(NetworkConnectorError):
    """Raised when a type name is not declared by the business network."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Type is not declared: {type_name}")
        self.type_name = type_name


class ResourceNotFoundError(NetworkConnectorError):
    """Raised when a registry holds no resource with the given id."""

    def __init__(self, type_name: str, resource_id: str) -> None:
        super().__init__(f"Object with ID '{resource_id}' in collection with ID '{type_name}' does not exist")
        self.type_name = type_name
        self.resource_id = resource_id


class ResourceExistsError(NetworkConnectorError):
    """Raised when adding a resource whose id is already registered."""

    def __init__(self, type_name: str, resource_id: str) -> None:
        super().__init__(f"Object with ID '{resource_id}' in collection with ID '{type_name}' already exists")
        self.type_name = type_name
        self.resource_id = resource_id


class ResourceValidationError(NetworkConnectorError):
    """Raised when a JSON payload does not match its declared type."""

    def __init__(self, type_name: str, reason: str) -> None:
        super().__init__(f"Invalid instance of {type_name}: {reason}")
        self.type_name = type_name
        self.reason = reason


class InvalidFilterError(NetworkConnectorError):
    """Raised when an ORM query filter cannot be interpreted."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid filter: {reason}")
        self.reason = reason
