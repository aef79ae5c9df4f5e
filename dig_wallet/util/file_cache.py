from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from dig_wallet.util.default_root import DEFAULT_ROOT_PATH
from dig_wallet.util.errors import FileSystemError, SerializationError
from dig_wallet.util.lock import DEFAULT_LOCK_TIMEOUT, exclusive_lock

log = logging.getLogger(__name__)

CACHE_SUFFIX = ".json"


@dataclass
class FileCache:
    """
    A directory of small JSON documents, one file per key, under the root path.
    """

    cache_dir: Path
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    @classmethod
    def create(cls, relative_path: str, root_path: Path = DEFAULT_ROOT_PATH) -> FileCache:
        return cls(cache_dir=root_path / relative_path)

    def _path_for(self, key: str) -> Path:
        if len(key) == 0 or os.sep in key or (os.altsep is not None and os.altsep in key):
            raise FileSystemError(f"invalid cache key {key!r}", self.cache_dir)
        return self.cache_dir / f"{key}{CACHE_SUFFIX}"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise FileSystemError(f"failed to read cache file: {e}", path) from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"failed to deserialize cache data: {e}") from e
        if not isinstance(data, dict):
            raise SerializationError(f"cache entry {key!r} must be an object")
        return data

    def set(self, key: str, data: Dict[str, Any]) -> None:
        path = self._path_for(key)
        try:
            text = json.dumps(data, indent=2)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"failed to serialize cache data: {e}") from e
        with exclusive_lock(path, timeout=self.lock_timeout):
            temp_path = path.with_suffix("." + str(os.getpid()))
            try:
                temp_path.write_text(text, encoding="utf-8")
                os.replace(temp_path, path)
            except OSError as e:
                raise FileSystemError(f"failed to write cache file: {e}", path) from e
            finally:
                temp_path.unlink(missing_ok=True)

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise FileSystemError(f"failed to delete cache file: {e}", path) from e
        log.debug(f"Deleted cache entry {key!r} from {self.cache_dir}")

    def keys(self) -> List[str]:
        if not self.cache_dir.is_dir():
            return []
        return sorted(path.name[: -len(CACHE_SUFFIX)] for path in self.cache_dir.glob(f"*{CACHE_SUFFIX}"))

    def clear(self) -> None:
        for key in self.keys():
            self.delete(key)
