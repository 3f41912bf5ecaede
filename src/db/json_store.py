"""JSON file document store."""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from src.exceptions import StoreIOError

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT = {"products": []}


class JsonDocumentStore:
    """Holds a single JSON document in memory and mirrors it to one file on disk.

    Nothing is cached across calls: ``read`` always replaces the in-memory
    document with the file content and ``write`` always replaces the file
    content with the in-memory document.
    """

    def __init__(self, path: str | Path, default: dict[str, Any] | None = None):
        self.path = Path(path)
        self.default = default if default is not None else DEFAULT_DOCUMENT
        self.data: dict[str, Any] = copy.deepcopy(self.default)

    def read(self) -> dict[str, Any]:
        """Load the document from disk. A missing or empty file yields the default document."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raw = ""
        except OSError as e:
            logger.error(f"Error reading document store {self.path}: {e}")
            raise StoreIOError(f"Cannot read {self.path}: {e}") from e

        if not raw.strip():
            self.data = copy.deepcopy(self.default)
            return self.data

        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Malformed JSON in document store {self.path}: {e}")
            raise StoreIOError(f"Malformed JSON in {self.path}: {e}") from e

        self.data = loaded if isinstance(loaded, dict) else copy.deepcopy(self.default)
        return self.data

    def write(self) -> None:
        """Persist the in-memory document, replacing the file atomically."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self.data, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing document store {self.path}: {e}")
            raise StoreIOError(f"Cannot write {self.path}: {e}") from e
