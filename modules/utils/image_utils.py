"""Utility helpers for turning uploads into data URIs."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Optional, Union


def is_data_uri(value: str) -> bool:
    return value.startswith("data:") and ";base64," in value


def encode_data_uri(content: bytes, mime_type: str = "image/png") -> str:
    """Encode raw bytes as a base64 data URI."""
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def file_to_data_uri(path: Union[str, Path]) -> str:
    """Read an image file and return it as a data URI."""
    file_path = Path(path)
    mime_type = mimetypes.guess_type(file_path.name)[0] or "image/png"
    return encode_data_uri(file_path.read_bytes(), mime_type)


def upload_to_data_uri(upload: Optional[Union[str, Path]]) -> Optional[str]:
    """Normalize an upload (file path or existing data URI) to a data URI."""
    if upload is None:
        return None
    if isinstance(upload, str):
        if not upload.strip():
            return None
        if is_data_uri(upload):
            return upload
    return file_to_data_uri(upload)
