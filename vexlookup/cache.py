"""A small file cache that keeps fetched documents for a limited time."""

from __future__ import annotations

import tempfile
import time
from pathlib import Path

CACHE_TIME = 300.0


class FileCache:
    """Stores text under a key in a directory; entries expire after max_age seconds."""

    def __init__(self, directory: str | Path | None = None, max_age: float = CACHE_TIME) -> None:
        self.directory = Path(directory) if directory is not None else Path(tempfile.gettempdir())
        self.max_age = max_age

    def path_for(self, key: str) -> Path:
        """Return the file that holds the entry for key."""
        return self.directory / (key.replace("-", "_") + ".cache")

    def get(self, key: str) -> str | None:
        """Return the cached text for key, or None if it is missing, empty or expired."""
        path = self.path_for(key)
        try:
            if time.time() - path.stat().st_mtime > self.max_age:
                return None
            content = path.read_text(encoding="utf-8")
        except OSError:
            return None
        return content or None

    def put(self, key: str, content: str) -> bool:
        """Store content under key; return False if it could not be written."""
        try:
            self.path_for(key).write_text(content, encoding="utf-8")
        except OSError:
            return False
        return True