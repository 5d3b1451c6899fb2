"""Atomic persistence of rendered artifacts."""

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from bdd_telemetry.errors import SinkWriteError
from bdd_telemetry.rendering.document import Document

log = logging.getLogger(__name__)


@contextmanager
def open_artifact(destination: Path) -> Iterator[TextIO]:
    """Open a temporary file that replaces ``destination`` on success.

    The temporary file lives next to the destination so the final rename is
    atomic; readers see either the previous artifact or the complete new
    one. If the block raises, the temporary file is removed and the previous
    artifact is left untouched.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=destination.parent,
        prefix=f".{destination.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, destination)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def write_document(document: Document, destination: Path) -> Path:
    """Write a document to ``destination`` and return the written path.

    Raises:
        SinkWriteError: If the artifact cannot be written.

    """
    try:
        with open_artifact(destination) as handle:
            handle.write(document.content)
    except OSError as exc:
        raise SinkWriteError(f"Failed to write {destination}: {exc}") from exc

    log.debug("Wrote %s (%s)", destination, document.media_type)
    return destination
