"""Tests for HTTP helper functions and logging setup."""

import base64
import logging

import pytest

from common.logging_config import SensitiveDataFilter
from common.types import chunk_count
from kvfs.exceptions import InvalidArgumentError
from kvfs.utils import decode_base64_body, parse_non_negative_int


@pytest.mark.parametrize("value,expected", [("0", 0), ("42", 42), (" 7 ", 7)])
def test_parse_non_negative_int(value, expected):
    assert parse_non_negative_int(value, "offset") == expected


@pytest.mark.parametrize("value", [None, "", "-1", "1.5", "abc"])
def test_parse_non_negative_int_rejects(value):
    with pytest.raises(InvalidArgumentError):
        parse_non_negative_int(value, "size")


def test_decode_base64_body_ignores_whitespace():
    encoded = base64.b64encode(b"\x00binary\xff")
    assert decode_base64_body(encoded[:4] + b"\n" + encoded[4:] + b"\r\n") == b"\x00binary\xff"


def test_decode_base64_body_empty():
    assert decode_base64_body(b"") == b""


@pytest.mark.parametrize("body", [b"abc", b"@@@@", "é".encode("utf-8")])
def test_decode_base64_body_rejects(body):
    with pytest.raises(InvalidArgumentError):
        decode_base64_body(body)


@pytest.mark.parametrize("size,expected", [(0, 0), (1, 1), (3000, 1), (3001, 2), (30000, 10)])
def test_chunk_count(size, expected):
    assert chunk_count(size) == expected


def test_sensitive_data_filter_masks_api_key():
    record = logging.LogRecord(
        "kvfs", logging.INFO, __file__, 1, "headers api_key=secret123 sent", None, None
    )

    SensitiveDataFilter().filter(record)

    assert "secret123" not in record.getMessage()
    assert "***MASKED***" in record.getMessage()
