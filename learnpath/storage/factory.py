"""Storage provider factory for guest storage namespaces."""

import re
from functools import lru_cache
from pathlib import Path

from learnpath.config import get_settings
from learnpath.exceptions import ValidationError

from .base import AbstractStorage
from .local import LocalStorage


GUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_guest_id(guest_id: str) -> str:
    """Ensure a guest id is safe to use as a directory name."""
    if not GUEST_ID_PATTERN.match(guest_id):
        msg = "Guest id must be 1-64 characters of letters, digits, '-' or '_'"
        raise ValidationError(msg)
    return guest_id


@lru_cache(maxsize=1024)
def get_guest_storage(guest_id: str) -> AbstractStorage:
    """Get the local storage namespace for one guest.

    Cached so repeated requests from the same guest share one instance.
    """
    settings = get_settings()
    validate_guest_id(guest_id)
    return LocalStorage(base_path=Path(settings.LOCAL_STORAGE_PATH) / guest_id)
