"""Storage Module - scoped access to dataset files."""

from storage.artifacts import (
    open_for_read,
    open_for_write,
    render_text,
    store_text,
    write_text_artifact,
    content_type_for,
)

__all__ = [
    "open_for_read",
    "open_for_write",
    "render_text",
    "store_text",
    "write_text_artifact",
    "content_type_for",
]
