"""Custom exceptions for the document store."""


class DocumentStoreError(Exception):
    """Raised when the remote document store cannot complete a read or write."""
