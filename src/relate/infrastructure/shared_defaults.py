"""Shared key-value area (one JSON document per app group) and the pending-interaction inbox.

Whole-document writes are atomic (temp file + os.replace). Read-then-write
sequences are not: an append landing between the importer's read and its
clear is lost.
"""

import json
import logging
import os
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from relate.application.inbox_import import PENDING_INTERACTIONS_KEY

logger = logging.getLogger(__name__)


class SharedDefaults:
    """Named key-value area stored at <directory>/<suite_name>.json."""

    def __init__(self, directory: Path, suite_name: str) -> None:
        suite_name = (suite_name or "").strip()
        if not suite_name:
            raise ValueError("suite_name must be non-empty")
        self._path = Path(directory) / f"{suite_name}.json"

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Shared defaults %s unreadable, treating as empty: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Shared defaults %s is not an object, treating as empty", self._path)
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class PendingInteractionInbox:
    """Ordered list of raw interaction records under the pendingInteractions key."""

    def __init__(self, defaults: SharedDefaults, key: str = PENDING_INTERACTIONS_KEY) -> None:
        self._defaults = defaults
        self._key = key

    def read_all(self) -> list[Any]:
        value = self._defaults.get(self._key)
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Pending interactions value is %s, not a list", type(value).__name__)
            return [value]
        return value

    def append(
        self,
        contact_id: str,
        type_label: str,
        note: str,
        date: datetime | None = None,
    ) -> dict[str, Any]:
        """Queue one record for the main application (producer side)."""
        record = {
            "contactID": contact_id,
            "type": type_label,
            "note": note,
            "date": date.timestamp() if date is not None else time.time(),
        }
        pending = self.read_all()
        pending.append(record)
        self._defaults.set(self._key, pending)
        return record

    def clear(self) -> None:
        self._defaults.remove(self._key)
