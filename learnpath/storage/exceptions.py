"""Custom exceptions for the storage module."""


class StorageError(Exception):
    """Base exception for storage operations."""


class FileWriteError(StorageError):
    """Raised when writing a stored value fails."""


class FileReadError(StorageError):
    """Raised when reading a stored value fails."""


class FileDeleteError(StorageError):
    """Raised when deleting a stored value fails."""


class StorageFileNotFoundError(StorageError):
    """Raised when a key is not present in storage."""
