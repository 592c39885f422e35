"""
Local persistent key/value store.

Mirrors browser local storage: string keys, each value kept as a JSON string.
The whole store lives in one JSON file and every write rewrites that file.
There is no locking; concurrent writers can lose updates.
"""
import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CURRENT_USER = "currentUser"
USERS = "users"
QUIZZES = "quizzes"
QUIZZES_CACHE = "quizzes_cache"
STUDENT_ATTEMPTS = "studentAttempts"


class LocalStore:
    def __init__(self, path: Optional[str] = None):
        """``path=None`` keeps everything in memory."""
        self.path = path
        self._memory: Dict[str, str] = {}

    def _read(self) -> Dict[str, str]:
        if self.path is None:
            return dict(self._memory)
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"Local store {self.path} unreadable, treating as empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        if self.path is None:
            self._memory = data
            return
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=directory, prefix=".quizhub-", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._read().get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding unparseable value under {key!r}")
            return default

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = json.dumps(value, default=str)
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)
