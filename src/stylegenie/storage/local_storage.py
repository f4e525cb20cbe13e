"""
Device storage: a small string key/value store persisted as one JSON file.
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional
from loguru import logger


class LocalStorage:
    """Key/value strings, rewritten to disk synchronously on every change.

    With no path the store lives only in memory.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._items: Dict[str, str] = self._read()

    @classmethod
    def from_settings(cls, settings) -> "LocalStorage":
        return cls(Path(settings.DATA_DIR) / settings.STORAGE_FILE)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

    def keys(self):
        return list(self._items)

    def _read(self) -> Dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read device storage {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring device storage with unexpected shape in {self.path}")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
            tmp_path.write_text(json.dumps(self._items, ensure_ascii=False), encoding='utf-8')
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to save device storage {self.path}: {e}")
