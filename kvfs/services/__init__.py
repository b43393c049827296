"""Service layer for filesystem operations."""

from kvfs.services.directory_service import DirectoryService
from kvfs.services.filesystem_service import FileSystemService
from kvfs.services.path_deleter import PathDeleter
from kvfs.services.range_reader import RangeReader
from kvfs.services.range_writer import RangeWriter

__all__ = [
    "DirectoryService",
    "FileSystemService",
    "PathDeleter",
    "RangeReader",
    "RangeWriter",
]
