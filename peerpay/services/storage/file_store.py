"""
File-Backed Storage Implementation

DESIGN DECISION: Each key is stored as its own file inside a data
directory. This mirrors how a mobile app's preferences store behaves:
1. Values survive process restarts
2. Keys are independent documents
3. A user can inspect or delete a single value by hand

TRADEOFFS:
- No transactions across keys (a crash between two writes can leave
  balance and transactions out of step)
- Not suitable for large data (every write rewrites the whole value)

Each write goes to a temp file first and is then renamed over the old
value, so a single key is never left half-written.
"""

import os
import re
from pathlib import Path
from typing import Optional, Union

from peerpay.config import get_settings
from peerpay.services.storage.interface import (
    InvalidKeyError,
    KeyValueStore,
    StorageError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_SUFFIX = ".json"


class FileKeyValueStore(KeyValueStore):
    """
    Key/value store writing one file per key.

    The data directory is created on first write.
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        if data_dir is None:
            data_dir = get_settings().storage.data_dir
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key) or key in (".", ".."):
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{_SUFFIX}"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tmp.open("wb") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
