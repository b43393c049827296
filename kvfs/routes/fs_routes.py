"""Filesystem API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from kvfs.schemas.common import ErrorResponse
from kvfs.schemas.fs import (
    DeleteResponse,
    DirEntryResponse,
    MetadataResponse,
    MkdirResponse,
    WriteResponse,
)
from kvfs.dependencies import get_filesystem
from kvfs.services.filesystem_service import FileSystemService
from kvfs.utils import decode_base64_body, parse_non_negative_int

router = APIRouter(
    prefix="/api",
    tags=["Filesystem"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


@router.get("/metadata", response_model=MetadataResponse)
async def get_metadata(
    path: Optional[str] = Query(None, description="Absolute path of the file or directory"),
    fs: FileSystemService = Depends(get_filesystem),
):
    """
    Get file or directory metadata.

    Raises:
        - 400: Missing or malformed path
        - 401: Missing store credentials
        - 404: Path does not exist
        - 500: Stored metadata is corrupt
    """
    metadata = await fs.get_metadata(path)
    return MetadataResponse(**metadata.to_dict())


@router.get("/list", response_model=List[DirEntryResponse])
async def list_directory(
    path: Optional[str] = Query(None, description="Absolute path of the directory to list"),
    fs: FileSystemService = Depends(get_filesystem),
):
    """
    List the direct children of a directory.

    Returns:
        - [{name, isDir}] one entry per child

    Raises:
        - 400: Missing or malformed path, or path is a file
        - 401: Missing store credentials
    """
    entries = await fs.list_directory(path)
    return [DirEntryResponse(name=entry.name, is_dir=entry.is_dir) for entry in entries]


@router.post("/mkdir", response_model=MkdirResponse, status_code=status.HTTP_201_CREATED)
async def make_directory(
    response: Response,
    path: Optional[str] = Query(None, description="Absolute path of the directory to create"),
    fs: FileSystemService = Depends(get_filesystem),
):
    """
    Create a directory. Creating an existing directory succeeds.

    Returns:
        - 201 when created, 200 when it already existed

    Raises:
        - 400: Missing, malformed or root path
        - 401: Missing store credentials
        - 409: Path exists but is not a directory
    """
    created = await fs.make_directory(path)
    if not created:
        response.status_code = status.HTTP_200_OK
        return MkdirResponse(success=True, message="Directory already exists")
    return MkdirResponse(success=True)


@router.get("/read")
async def read_file(
    path: Optional[str] = Query(None, description="Absolute path of the file"),
    offset: Optional[str] = Query(None, description="Byte offset to start reading at"),
    size: Optional[str] = Query(None, description="Number of bytes to read"),
    fs: FileSystemService = Depends(get_filesystem),
):
    """
    Read a byte range of a file.

    Returns:
        - application/octet-stream body, clipped to the end of the file

    Raises:
        - 400: Missing or invalid parameters, or path is a directory
        - 401: Missing store credentials
        - 404: File does not exist
    """
    offset_value = parse_non_negative_int(offset, "offset")
    size_value = parse_non_negative_int(size, "size")

    data = await fs.read(path, offset_value, size_value)
    return Response(content=data, media_type="application/octet-stream")


@router.post("/write", response_model=WriteResponse)
async def write_file(
    request: Request,
    path: Optional[str] = Query(None, description="Absolute path of the file"),
    offset: Optional[str] = Query(None, description="Byte offset to write at"),
    fs: FileSystemService = Depends(get_filesystem),
):
    """
    Write base64-encoded request body data at a byte offset, creating the file if needed.

    Returns:
        - bytesWritten: number of decoded bytes written

    Raises:
        - 400: Missing or invalid parameters, bad base64, or path is a directory
        - 401: Missing store credentials
        - 502: Store failure (including metadata update after chunk writes)
    """
    offset_value = parse_non_negative_int(offset, "offset")
    data = decode_base64_body(await request.body())

    written = await fs.write(path, offset_value, data)
    return WriteResponse(bytes_written=written)


@router.delete("/delete", response_model=DeleteResponse)
async def delete_path(
    path: Optional[str] = Query(None, description="Absolute path to delete"),
    fs: FileSystemService = Depends(get_filesystem),
):
    """
    Delete a file and all of its chunks, or an empty directory.

    Raises:
        - 400: Missing, malformed or root path, or directory not empty
        - 401: Missing store credentials
        - 502: Store failure
    """
    await fs.delete(path)
    return DeleteResponse(success=True)
