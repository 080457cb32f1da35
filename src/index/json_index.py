# src/index/json_index.py - v1
"""JSON file-based side-index (default SIDE_INDEX_BACKEND=json).

One JSON object per hash name under SIDE_INDEX_ROOT.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from filestorage.index.base_side_index import BaseSideIndex

logger = logging.getLogger(__name__)


class JsonSideIndex(BaseSideIndex):
    """File-based side-index for single-host deployments."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9._-]", "_", name)
        return self._root / f"{safe}.json"

    def _load(self, name: str) -> dict[str, str]:
        path = self._path(name)
        if not path.exists():
            return {}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Corrupt side-index file %s: %s", path, e)
            return {}

    def hash_set(self, name: str, field: str, value: str) -> None:
        data = self._load(name)
        data[field] = value
        self._path(name).write_text(json.dumps(data), encoding="utf-8")

    def hash_get(self, name: str, field: str) -> str | None:
        return self._load(name).get(field)

    def hash_delete(self, name: str, field: str) -> None:
        data = self._load(name)
        if data.pop(field, None) is None:
            return
        if data:
            self._path(name).write_text(json.dumps(data), encoding="utf-8")
        else:
            self._path(name).unlink(missing_ok=True)
