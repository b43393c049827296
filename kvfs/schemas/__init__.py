"""Pydantic schemas for API requests and responses."""

from kvfs.schemas.fs import (
    MetadataResponse,
    DirEntryResponse,
    MkdirResponse,
    WriteResponse,
    DeleteResponse
)
from kvfs.schemas.common import ErrorResponse

__all__ = [
    "MetadataResponse",
    "DirEntryResponse",
    "MkdirResponse",
    "WriteResponse",
    "DeleteResponse",
    "ErrorResponse"
]
