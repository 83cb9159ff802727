"""Error classes for player linking.

Protocol outcomes (invalid code, expired request, ...) are NOT errors; they
are LinkRequestResult values. The classes here signal genuine faults:
corrupted identities, storage failures and bad caller input.
"""


class PlayerLinkError(Exception):
    """Base class for player link errors.

    Attributes:
        code: Machine-readable error code (e.g., "STORAGE_ERROR").
        message: Human-readable error message.
    """

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class MalformedIdentityError(PlayerLinkError):
    """Identity bytes could not be decoded (or encoded).

    Never expected in normal operation: a wrong-length value means a
    programming error or a corrupted row.
    """

    def __init__(self, message: str) -> None:
        super().__init__(code="MALFORMED_IDENTITY", message=message)


class StorageError(PlayerLinkError):
    """The backing store failed an operation.

    Wraps connectivity faults, constraint violations and I/O timeouts.
    Raised ``from`` the underlying exception so the cause is preserved.

    Attributes:
        operation: Name of the failed operation (e.g., "link_player").
        key: Identity or username the operation was keyed on.
    """

    def __init__(self, operation: str, key: object | None = None) -> None:
        self.operation = operation
        self.key = key
        if key is None:
            message = f"Storage failure during {operation}"
        else:
            message = f"Storage failure during {operation} for '{key}'"
        super().__init__(code="STORAGE_ERROR", message=message)


class InvalidUsernameError(PlayerLinkError):
    """Username is empty or longer than the storage column allows."""

    def __init__(self, field: str, value: str, max_length: int) -> None:
        self.field = field
        super().__init__(
            code="INVALID_USERNAME",
            message=(
                f"{field} must be between 1 and {max_length} characters "
                f"(got {len(value)})"
            ),
        )
