"""
Client-local key/value storage (string -> string).
Backs the persisted view mode. Views receive a storage object instead of
touching the filesystem themselves, so tests can pass MemoryStorage.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MemoryStorage:
    """In-process storage. Forgets everything when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value


class JsonFileStorage:
    """Storage persisted as a flat JSON object in one file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return str(value) if value is not None else None

    def set(self, key: str, value: str):
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(exist_ok=True, parents=True)
        self.path.write_text(json.dumps(data, indent=2), encoding='utf-8')
        logger.debug(f"Saved {key}={value!r} to {self.path}")
