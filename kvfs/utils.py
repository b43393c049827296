"""Utility helper functions for the HTTP layer."""

import base64
import binascii
from typing import Optional

from kvfs.exceptions import InvalidArgumentError


def parse_non_negative_int(value: Optional[str], name: str) -> int:
    """
    Parse a required non-negative integer query parameter.

    Args:
        value: Raw parameter value
        name: Parameter name for error messages

    Returns:
        Parsed integer

    Raises:
        InvalidArgumentError: If the value is missing, not an integer or negative
    """
    if value is None or value.strip() == "":
        raise InvalidArgumentError(f"Parameter '{name}' is required")
    try:
        number = int(value, 10)
    except ValueError:
        raise InvalidArgumentError(f"Invalid {name}: {value!r}")
    if number < 0:
        raise InvalidArgumentError(f"Invalid {name}: {value!r}")
    return number


def decode_base64_body(body: bytes) -> bytes:
    """
    Decode a base64 request body, ignoring whitespace.

    Raises:
        InvalidArgumentError: If the body is not valid base64
    """
    try:
        text = "".join(body.decode("ascii").split())
        return base64.b64decode(text, validate=True)
    except (UnicodeDecodeError, binascii.Error) as e:
        raise InvalidArgumentError(f"Invalid base64 data in request body: {e}")
