"""Domain errors raised by services and translated to HTTP responses in userhub.main."""


class ServiceError(Exception):
    """Base class for errors that map onto a client-facing status code."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(ServiceError):
    """Raised when input passes schema validation but is still unusable (e.g. unknown sort field)."""

    status_code = 400


class DuplicateEmailError(ServiceError):
    """Raised when the email unique constraint rejects a create or update."""

    status_code = 400

    def __init__(self, message: str = "Email already registered.") -> None:
        super().__init__(message)


class InvalidCredentialsError(ServiceError):
    """Raised on failed login; the message never says which check failed."""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Raised when the access policy denies an operation."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class AccountNotFoundError(ServiceError):
    status_code = 404

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class StorageError(ServiceError):
    """Raised for unexpected storage failures. The message is safe to return to clients."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
