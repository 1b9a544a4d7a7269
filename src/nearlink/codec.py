"""Structured-data codec for contract arguments and results.

Contract arguments travel as UTF-8 JSON bytes, and on the JSON wire a byte
sequence is written as a list of integers.
"""

import json
from typing import Any


def encode_args(document: Any) -> bytes:
    """Serialize an argument document to bytes.

    Parameters
    ----------
    document : Any
        A JSON-serializable document.

    Returns
    -------
    bytes
        Compact UTF-8 JSON.

    Raises
    ------
    ValueError
        If the document cannot be serialized.
    """
    try:
        text = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    except TypeError as e:
        raise ValueError(f"Arguments are not JSON serializable: {e}") from e
    return text.encode("utf-8")


def decode_payload(data: bytes | bytearray | list[int]) -> Any:
    """Decode bytes (or a wire byte list) back into a document.

    Parameters
    ----------
    data : bytes | bytearray | list[int]
        The encoded payload.

    Returns
    -------
    Any
        The decoded document.

    Raises
    ------
    ValueError
        If the payload is not valid UTF-8 JSON.
    """
    if isinstance(data, list):
        try:
            data = bytes(data)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Payload is not a byte list: {e}") from e
    elif not isinstance(data, (bytes, bytearray)):
        raise ValueError(f"Unsupported payload type: {type(data).__name__}")

    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Payload is not valid JSON: {e}") from e


def to_byte_list(data: bytes | bytearray) -> list[int]:
    """Convert bytes to the JSON wire form (list of byte values)."""
    return list(data)
