"""Local persistent storage used for guest progress."""

from .base import AbstractStorage
from .exceptions import StorageError, StorageFileNotFoundError
from .factory import get_guest_storage
from .local import LocalStorage


__all__ = ["AbstractStorage", "LocalStorage", "StorageError", "StorageFileNotFoundError", "get_guest_storage"]
