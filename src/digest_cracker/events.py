"""
Search event sink.
"""

import logging
from typing import Any

from digest_cracker.config import NODE_SERVER_LOGGER


class EventSink:
    """Receives search events; the default writes them to the node log."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(NODE_SERVER_LOGGER)

    def emit(self, event: str, **fields: Any) -> None:
        details = ", ".join(f"{key}={value}" for key, value in fields.items())
        self._logger.info(f"{event}: {details}" if details else event)


class RecordingEventSink(EventSink):
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]
