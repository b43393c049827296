"""Custom exception classes for the filesystem layer."""


class KVFSException(Exception):
    """
    Base exception class for all KVFS-related errors.
    """
    pass


class InvalidArgumentError(KVFSException):
    """
    Raised when a path, offset or size is missing or malformed.
    """
    pass


class UnauthorizedError(KVFSException):
    """
    Raised when store credentials are missing.
    """
    pass


class NotFoundError(KVFSException):
    """
    Raised when a path has no metadata record and one was required.
    """
    pass


class IsDirectoryError(KVFSException):
    """
    Raised when a file operation targets a directory.
    """
    pass


class NotDirectoryError(KVFSException):
    """
    Raised when a directory operation targets a regular file.
    """
    pass


class ConflictError(KVFSException):
    """
    Raised when creating a directory over an existing non-directory.
    """
    pass


class DirectoryNotEmptyError(KVFSException):
    """
    Raised when deleting a directory that still has keys under it.
    """
    pass


class CorruptMetadataError(KVFSException):
    """
    Raised when a stored metadata value cannot be parsed.
    """
    pass


class StoreError(KVFSException):
    """
    Raised when a call to the underlying key-value store fails.
    """

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class MetadataUpdateError(StoreError):
    """
    Raised when chunk writes succeeded but the metadata update did not.

    The store is left with chunks ahead of metadata; nothing is rolled back.
    """
    pass
