"""Abstract storage interface for key/value blob storage."""

from abc import ABC, abstractmethod


class AbstractStorage(ABC):
    """Abstract base class for storage providers."""

    @abstractmethod
    async def write(self, key: str, content: str) -> None:
        """Store text content under a key, replacing any previous value.

        Args:
            key: The storage key
            content: Text to store

        Raises
        ------
            FileWriteError: If the write fails.
        """
        raise NotImplementedError

    @abstractmethod
    async def read(self, key: str) -> str:
        """Read the text stored under a key.

        Args:
            key: The storage key

        Returns
        -------
            The stored text.

        Raises
        ------
            StorageFileNotFoundError: If nothing is stored under the key.
            FileReadError: If the read fails.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error.

        Args:
            key: The storage key

        Raises
        ------
            FileDeleteError: If the deletion fails.
        """
        raise NotImplementedError
