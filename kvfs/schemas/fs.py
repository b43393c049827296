"""Pydantic schemas for filesystem endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MetadataResponse(BaseModel):
    """Response model for path metadata."""
    mode: int
    uid: int
    gid: int
    size: int
    atime: int
    mtime: int
    ctime: int
    num_chunks: int


class DirEntryResponse(BaseModel):
    """One directory listing entry."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    is_dir: bool = Field(alias="isDir")


class MkdirResponse(BaseModel):
    """Response model for directory creation."""
    success: bool
    message: Optional[str] = None


class WriteResponse(BaseModel):
    """Response model for a range write."""
    model_config = ConfigDict(populate_by_name=True)

    bytes_written: int = Field(alias="bytesWritten")


class DeleteResponse(BaseModel):
    """Response model for path deletion."""
    success: bool
