"""
Custom exceptions for the merged blocks checker.

Fatal conditions (bad range, unusable store) are raised to the caller.
Per-bundle conditions (unreadable object, corrupt block stream) are raised
by the store and decoder, then caught by the segment validator and turned
into report warnings so the walk can continue.
"""


class CheckerError(Exception):
    """Base exception for all merged blocks checker errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidRangeError(CheckerError):
    """Raised when a block range is malformed or not resolved."""

    def __init__(self, message: str, block_range: str | None = None):
        details = {}
        if block_range is not None:
            details["block_range"] = block_range
        super().__init__(message, details)
        self.block_range = block_range


class ConfigError(CheckerError):
    """Raised when check configuration is invalid."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Invalid configuration for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class StoreError(CheckerError):
    """Raised when the blob store cannot be listed."""

    def __init__(self, message: str, store_url: str | None = None, cause: Exception | None = None):
        details: dict = {}
        if store_url:
            details["store_url"] = store_url
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.store_url = store_url
        self.cause = cause


class StoreConstructionError(StoreError):
    """Raised when a store URL cannot be turned into a store."""

    def __init__(self, store_url: str, reason: str):
        super().__init__(f"Unable to create store for {store_url}: {reason}", store_url)
        self.details["reason"] = reason
        self.reason = reason


class StorageIOError(CheckerError):
    """Raised when a store object operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        if cause:
            message += f" ({cause})"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class BlockDecodeError(CheckerError):
    """Raised when a bundle's block stream cannot be decoded."""

    def __init__(self, key: str, blocks_read: int, reason: str):
        super().__init__(
            f"Unable to decode block #{blocks_read + 1} of {key}: {reason}",
            {"key": key, "blocks_read": blocks_read, "reason": reason},
        )
        self.key = key
        self.blocks_read = blocks_read
        self.reason = reason
