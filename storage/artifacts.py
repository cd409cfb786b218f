"""Dataset file storage.

Each backing file is acquired for exactly one parse or produce pass and
released afterwards, whether the pass succeeds or not. Writes overwrite the
destination entirely and return a DataReference describing what was written.
"""

import hashlib
import io
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, TextIO, Union

from models.refs import DataReference


PathLike = Union[str, Path]

CONTENT_TYPES = {
    ".csv": "text/csv",
    ".export": "text/csv",
    ".excel": "text/csv",
    ".json": "application/json",
    ".flat": "text/plain",
}


def _compute_sha256(data: bytes) -> str:
    """Compute SHA256 hash of bytes."""
    return hashlib.sha256(data).hexdigest()


def content_type_for(path: PathLike) -> str:
    return CONTENT_TYPES.get(Path(path).suffix.lower(), "text/plain")


@contextmanager
def open_for_read(path: PathLike) -> Iterator[TextIO]:
    """Open a dataset file for one read pass.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    with open(path, "r", encoding="utf-8", newline="") as reader:
        yield reader


@contextmanager
def open_for_write(path: PathLike, ensure_parent: bool = True) -> Iterator[TextIO]:
    """Open a dataset file for one write pass, truncating it."""
    path = Path(path)
    if ensure_parent:
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as writer:
        yield writer


def render_text(produce: Callable[[TextIO], None]) -> str:
    """Run ``produce`` against an in-memory stream and return what it wrote."""
    buffer = io.StringIO(newline="")
    produce(buffer)
    return buffer.getvalue()


def store_text(path: PathLike, text: str, ensure_parent: bool = True) -> DataReference:
    """Overwrite ``path`` with already-rendered text.

    Returns:
        DataReference with artifact metadata
    """
    data = text.encode("utf-8")

    with open_for_write(path, ensure_parent=ensure_parent) as writer:
        writer.write(text)

    return DataReference(
        storage_uri=str(Path(path).absolute()),
        content_hash=_compute_sha256(data),
        content_type=content_type_for(path),
        size_bytes=len(data),
        stored_at=datetime.utcnow(),
    )


def write_text_artifact(
    path: PathLike,
    produce: Callable[[TextIO], None],
    ensure_parent: bool = True,
) -> DataReference:
    """Render content through ``produce`` and store it at ``path``.

    The content is rendered in memory first so that a failing producer
    leaves the previous file untouched.

    Args:
        path: Destination file path
        produce: Callback that writes the full content to a text stream
        ensure_parent: Create parent directories if they don't exist

    Returns:
        DataReference with artifact metadata
    """
    return store_text(path, render_text(produce), ensure_parent=ensure_parent)
