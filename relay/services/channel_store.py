"""
Channel allow-list store.

Chat front ends keep the set of channels they auto-reply in behind this
interface. The dispatch layer never reads it.
"""

import json
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()


class ChannelStore(Protocol):
    def contains(self, channel_id: str) -> bool:
        ...

    def add(self, channel_id: str) -> bool:
        ...

    def remove(self, channel_id: str) -> bool:
        ...

    def list(self) -> list[str]:
        ...


class InMemoryChannelStore:
    """Unordered set of channel ids held in memory."""

    def __init__(self, channel_ids: list[str] | None = None):
        self._channels: set[str] = set(channel_ids or [])

    def contains(self, channel_id: str) -> bool:
        return channel_id in self._channels

    def add(self, channel_id: str) -> bool:
        """Add a channel. Returns False if it was already present."""
        if channel_id in self._channels:
            return False
        self._channels.add(channel_id)
        return True

    def remove(self, channel_id: str) -> bool:
        """Remove a channel. Returns False if it was not present."""
        if channel_id not in self._channels:
            return False
        self._channels.discard(channel_id)
        return True

    def list(self) -> list[str]:
        return sorted(self._channels)


class JsonFileChannelStore(InMemoryChannelStore):
    """
    Allow-list persisted as a JSON array.

    The file is read once on construction and rewritten after every
    successful mutation. A missing or unreadable file starts an empty set.
    """

    def __init__(self, path: str | Path = "ai-channels.json"):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> list[str]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("channel_store_load_failed", path=str(self.path), error=str(e))
            return []
        if not isinstance(data, list):
            logger.warning("channel_store_invalid_format", path=str(self.path))
            return []
        channels = [str(c) for c in data]
        logger.info("channel_store_loaded", path=str(self.path), count=len(channels))
        return channels

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.list()), encoding="utf-8")
        logger.info("channel_store_saved", path=str(self.path), count=len(self._channels))

    def add(self, channel_id: str) -> bool:
        added = super().add(channel_id)
        if added:
            self._save()
        return added

    def remove(self, channel_id: str) -> bool:
        removed = super().remove(channel_id)
        if removed:
            self._save()
        return removed
