# src/detection/file_type.py - v1
"""Detect proprietary XLIFF dialects produced by third-party CAT tools.

Only the head of the file is inspected; dialects are recognised by marker
strings in the root/``<file>`` element.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filestorage.core.models import FileTypeInfo

logger = logging.getLogger(__name__)

HEAD_BYTES = 4096

# (marker, dialect name). First match wins.
PROPRIETARY_MARKERS: list[tuple[str, str]] = [
    ("globalsight", "GlobalSight"),
    ("idiominc.com", "WorldServer"),
    ("<tradostag", "Trados TTX"),
    ("<txml", "Wordfast TXML"),
    ("xmlns:mq=", "memoQ"),
    ("xmlns:mq ", "memoQ"),
    ("across.com", "Across"),
]


class FileTypeDetector:
    """Classify converted work files before they enter the cache."""

    def __init__(self, head_bytes: int = HEAD_BYTES) -> None:
        self._head_bytes = head_bytes

    def detect(self, path: str | Path) -> FileTypeInfo:
        """Return extension and proprietary dialect of a local file.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
        """
        p = Path(path)
        extension = p.suffix.lstrip(".").lower()

        with p.open("rb") as fh:
            head = fh.read(self._head_bytes).decode("utf-8", errors="ignore").lower()

        for marker, name in PROPRIETARY_MARKERS:
            if marker in head:
                logger.debug("%s detected as proprietary %s", p.name, name)
                return FileTypeInfo(
                    proprietary=True, proprietary_name=name, extension=extension
                )

        return FileTypeInfo(proprietary=False, extension=extension)
