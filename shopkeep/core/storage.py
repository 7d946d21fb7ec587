"""
Flat-file snapshot storage.

One JSON file per resource holding the whole record collection. Every save
rewrites the file wholesale; there is no append log and no partial update.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from shopkeep.core.logger import get_logger

logger = get_logger(__name__)


class StorageError(Exception):
    """Raised when a snapshot cannot be read or written"""


class JsonFileStore:
    """Load and save a list of JSON records kept in a single file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> list[dict[str, Any]]:
        """
        Read all records.

        Returns:
            The stored records, or an empty list when the file does not exist yet

        Raises:
            StorageError: If the file cannot be read or does not hold a list of objects
        """
        if not self.path.exists():
            return []

        try:
            with self.path.open("r", encoding="utf-8") as fh:
                records = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise StorageError(f"{self.path} does not contain a list of records")

        logger.info(f"Loaded {len(records)} records from {self.path}")
        return records

    def save(self, records: list[dict[str, Any]]) -> None:
        """
        Replace the snapshot with the given records.

        The new content is written to a temporary file next to the target and
        moved over it, so readers never observe a half-written file.

        Raises:
            StorageError: If the snapshot cannot be written
        """
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, ensure_ascii=False, indent=2)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write {self.path}: {e}") from e

        logger.debug(f"Saved {len(records)} records to {self.path}")
