"""
vaultbackup/codec.py - base64/JSON encoding of backup payloads.
"""
import base64
import binascii
import json
from typing import Any

from vaultbackup.errors import DecodeError


def encode_json(value: Any) -> str:
    """base64(JSON(value)) as text."""
    content = json.dumps(value, separators=(",", ":"))
    return encode_bytes(content.encode("utf-8"))


def encode_bytes(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def decode_bytes(blob: str | bytes, source: str = "") -> bytes:
    try:
        return base64.b64decode(blob.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"{source}: invalid base64: {e}") from e


def decode_json(blob: str | bytes, source: str = "") -> Any:
    """Inverse of encode_json."""
    return load_json(decode_bytes(blob, source), source)


def load_json(content: str | bytes, source: str = "") -> Any:
    try:
        return json.loads(content)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"{source}: invalid JSON: {e}") from e


def decode_mapping(blob: str | bytes, source: str = "") -> dict[str, Any]:
    """decode_json for payloads that must be a JSON object."""
    value = decode_json(blob, source)
    if not isinstance(value, dict):
        raise DecodeError(f"{source}: expected a JSON object, got {type(value).__name__}")
    return value
