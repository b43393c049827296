"""Tests for chunked range writes."""

import pytest

from common.constants import MAX_CHUNK_SIZE
from kvfs.exceptions import (
    InvalidArgumentError,
    IsDirectoryError,
    MetadataUpdateError,
    StoreError,
)
from kvfs.services.range_writer import splice_chunk


def pattern(length, seed=0):
    return bytes((seed + i * 7) % 256 for i in range(length))


def test_splice_overwrites_inside_chunk():
    assert splice_chunk(b"abcdef", 2, b"XY") == b"abXYef"


def test_splice_extends_chunk():
    assert splice_chunk(b"abc", 2, b"XYZ") == b"abXYZ"


def test_splice_zero_fills_gap():
    assert splice_chunk(b"ab", 4, b"Z") == b"ab\0\0Z"


@pytest.mark.asyncio
async def test_write_creates_file(fs, store, clock):
    written = await fs.write("/hello.txt", 0, b"hello")

    assert written == 5
    metadata = await fs.get_metadata("/hello.txt")
    assert metadata.is_file
    assert metadata.size == 5
    assert metadata.num_chunks == 1
    assert metadata.ctime == metadata.mtime == clock.now
    assert "/hello.txt.chunk0" in store


@pytest.mark.parametrize("chunks", [1, 2, 3])
@pytest.mark.asyncio
async def test_write_exact_chunk_multiple(fs, store, chunks):
    data = pattern(chunks * MAX_CHUNK_SIZE)

    await fs.write("/f", 0, data)

    metadata = await fs.get_metadata("/f")
    assert metadata.num_chunks == chunks
    assert f"/f.chunk{chunks - 1}" in store
    assert f"/f.chunk{chunks}" not in store
    assert await fs.read("/f", 0, len(data)) == data


@pytest.mark.asyncio
async def test_write_across_chunk_boundary_preserves_neighbours(fs):
    original = pattern(2 * MAX_CHUNK_SIZE)
    await fs.write("/f", 0, original)

    await fs.write("/f", MAX_CHUNK_SIZE - 1, b"XY")

    expected = bytearray(original)
    expected[MAX_CHUNK_SIZE - 1:MAX_CHUNK_SIZE + 1] = b"XY"
    assert await fs.read("/f", 0, len(original)) == bytes(expected)
    assert (await fs.get_metadata("/f")).size == len(original)


@pytest.mark.asyncio
async def test_write_at_offset_past_end_leaves_sparse_gap(fs, store):
    offset = 2 * MAX_CHUNK_SIZE + 10

    await fs.write("/sparse", offset, b"tail")

    metadata = await fs.get_metadata("/sparse")
    assert metadata.size == offset + 4
    assert metadata.num_chunks == 3
    assert "/sparse.chunk0" not in store
    assert "/sparse.chunk1" not in store
    assert await fs.read("/sparse", 0, metadata.size) == b"\0" * offset + b"tail"


@pytest.mark.asyncio
async def test_overwrite_keeps_ctime_and_updates_mtime(fs, clock):
    await fs.write("/f", 0, b"first")
    created = clock.now

    clock.now += 100
    await fs.write("/f", 0, b"F")

    metadata = await fs.get_metadata("/f")
    assert metadata.ctime == created
    assert metadata.mtime == created + 100
    assert metadata.size == 5
    assert await fs.read("/f", 0, 5) == b"First"


@pytest.mark.asyncio
async def test_zero_length_write_creates_empty_file(fs, store):
    assert await fs.write("/empty", 0, b"") == 0

    metadata = await fs.get_metadata("/empty")
    assert metadata.size == 0
    assert metadata.num_chunks == 0
    assert store.keys() == ["/empty.__meta__"]


@pytest.mark.asyncio
async def test_zero_length_write_leaves_existing_file_untouched(fs, clock):
    await fs.write("/f", 0, b"abc")
    clock.now += 50

    assert await fs.write("/f", 100, b"") == 0

    metadata = await fs.get_metadata("/f")
    assert metadata.size == 3
    assert metadata.mtime == clock.now - 50


@pytest.mark.asyncio
async def test_write_to_directory_fails(fs):
    await fs.make_directory("/dir")

    with pytest.raises(IsDirectoryError):
        await fs.write("/dir", 0, b"data")


@pytest.mark.asyncio
async def test_write_rejects_negative_offset(fs):
    with pytest.raises(InvalidArgumentError):
        await fs.write("/f", -1, b"data")


@pytest.mark.asyncio
async def test_write_rejects_bad_path(fs):
    with pytest.raises(InvalidArgumentError):
        await fs.write("relative", 0, b"data")


@pytest.mark.asyncio
async def test_chunk_failure_aborts_before_metadata(flaky_fs, flaky_store):
    flaky_store.fail_put = lambda key: key == "/f.chunk1"

    with pytest.raises(StoreError) as exc_info:
        await flaky_fs.write("/f", 0, pattern(2 * MAX_CHUNK_SIZE))

    assert not isinstance(exc_info.value, MetadataUpdateError)
    assert "chunk 1" in str(exc_info.value)
    assert "/f.chunk0" in flaky_store
    assert "/f.__meta__" not in flaky_store


@pytest.mark.asyncio
async def test_metadata_failure_after_chunks_written(flaky_fs, flaky_store):
    flaky_store.fail_put = lambda key: key.endswith(".__meta__")

    with pytest.raises(MetadataUpdateError) as exc_info:
        await flaky_fs.write("/f", 0, b"payload")

    assert "Write succeeded but failed to update metadata" in str(exc_info.value)
    assert "/f.chunk0" in flaky_store


@pytest.mark.asyncio
async def test_write_to_root_fails_and_leaves_root_a_directory(fs, store):
    with pytest.raises(IsDirectoryError):
        await fs.write("/", 0, b"x")

    assert len(store) == 0
    assert (await fs.get_metadata("/")).is_dir
    assert await fs.list_directory("/") == []


@pytest.mark.asyncio
async def test_zero_length_write_to_root_fails(fs, store):
    with pytest.raises(IsDirectoryError):
        await fs.write("/", 0, b"")

    assert "/.__meta__" not in store
