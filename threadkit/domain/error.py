"""Domain layer errors.

Every error carries a stable ``code`` so callers can branch on the kind of
failure without matching on message text.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error kinds."""

    # Configuration
    INVALID_STORE = "INVALID_STORE"

    # Validation
    MISSING_POST = "MISSING_POST"
    MISSING_AUTHOR = "MISSING_AUTHOR"
    MISSING_PARENT = "MISSING_PARENT"
    EMPTY_CONTENT = "EMPTY_CONTENT"
    MAX_LENGTH = "MAX_LENGTH"
    MAX_DEPTH = "MAX_DEPTH"
    INVALID_PARENT = "INVALID_PARENT"

    # Lookup
    COMMENT_NOT_FOUND = "NOT_FOUND"
    PARENT_NOT_FOUND = "PARENT_NOT_FOUND"

    # Authorization
    FORBIDDEN = "FORBIDDEN"

    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"


class DomainError(Exception):
    """Base domain error."""

    def __init__(self, message: str, code: ErrorCode):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(DomainError):
    """Raised when the comment store does not satisfy the storage contract."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_STORE):
        super().__init__(message, code)


class ValidationError(DomainError):
    """Domain validation error.

    Always raised before the store is touched.
    """

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: ErrorCode = ErrorCode.COMMENT_NOT_FOUND,
    ):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}", code)


class AuthorizationError(DomainError):
    """Raised when a user acts on content they don't own."""

    def __init__(self, action: str, resource: str, resource_id: str, user_id: str):
        self.resource = resource
        self.resource_id = resource_id
        self.user_id = user_id
        super().__init__(
            f"User {user_id} is not authorized to {action} {resource} {resource_id}",
            ErrorCode.FORBIDDEN,
        )


class UnsupportedOperationError(DomainError):
    """Raised when an optional store operation is not implemented."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Comment store does not support {operation}()",
            ErrorCode.UNSUPPORTED_OPERATION,
        )
