"""JSON file-based storage primitive shared by the storage adapters."""

import json
import os
import re
import sys
import tempfile
from pathlib import Path
from typing import List

_KEY_RE = re.compile(r"^[a-z0-9_]+$")


def _log(msg: str):
    print(msg, file=sys.stderr)


class JsonStorage:
    """One JSON array per key, written atomically."""

    def __init__(self, storage_dir: str = "data"):
        self._storage_dir = Path(storage_dir)
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._storage_dir / f"{key}.json"

    def load(self, key: str) -> List[dict]:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _log(f"[storage] unreadable {path.name}, treating as empty: {e}")
            return []
        return raw if isinstance(raw, list) else []

    def save(self, key: str, data: List[dict]) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, ensure_ascii=False, indent=2)
        # Atomic write
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent), suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, str(path))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
