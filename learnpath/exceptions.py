class DomainError(Exception):
    """Base exception class for all domain-specific exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ResourceNotFoundError(DomainError):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message)


class ValidationError(DomainError):
    """Exception raised when validation fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class AuthenticationRequiredError(DomainError):
    """Exception raised when an operation needs an identified user."""

    def __init__(self, message: str = "Sign in required") -> None:
        super().__init__(message)


class MergeInProgressError(DomainError):
    """Exception raised when a sign-in merge is already running for a guest record."""

    def __init__(self, guest_key: str) -> None:
        self.guest_key = guest_key
        super().__init__(f"Progress merge already in progress for guest {guest_key}")
