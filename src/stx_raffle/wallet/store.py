"""Durable single-slot storage for the active wallet session."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..exceptions import SessionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    """The persisted projection of a wallet session."""

    topic: str
    address: str

    def to_dict(self) -> dict[str, str]:
        return {"topic": self.topic, "address": self.address}

    @classmethod
    def from_dict(cls, data: Any) -> SessionRecord | None:
        if not isinstance(data, Mapping):
            return None
        topic = data.get("topic")
        address = data.get("address")
        if not isinstance(topic, str) or not topic:
            return None
        if not isinstance(address, str) or not address:
            return None
        return cls(topic=topic, address=address)


class SessionStore:
    """Persist one ``{topic, address}`` record as a JSON file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, record: SessionRecord) -> None:
        """Overwrite the slot atomically."""

        payload = json.dumps(record.to_dict())
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".session-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("Failed to persist wallet session to %s: %s", self._path, exc)
            raise SessionError(
                "Failed to persist wallet session", details={"path": str(self._path)}
            ) from exc

    def load(self) -> SessionRecord | None:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unable to read wallet session from %s: %s", self._path, exc)
            return None

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt wallet session file %s", self._path)
            return None

        record = SessionRecord.from_dict(data)
        if record is None:
            logger.warning("Ignoring wallet session file with unexpected shape %s", self._path)
        return record

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Unable to remove wallet session file %s: %s", self._path, exc)
