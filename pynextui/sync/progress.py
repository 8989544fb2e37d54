"""Change notifications emitted by a sync session."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .models import SyncCounters, SyncPhase

logger = logging.getLogger(__name__)


class SyncProgressEvent(str, Enum):
    """Kinds of session changes."""

    PHASE_CHANGED = "phase_changed"
    SELECTION_CHANGED = "selection_changed"
    FILE_START = "file_start"
    FILE_COMPLETE = "file_complete"
    POLICY_CHANGED = "policy_changed"


@dataclass
class SyncProgressInfo:
    """Snapshot passed to listeners with each event."""

    event: SyncProgressEvent
    phase: SyncPhase
    counters: SyncCounters
    system_dir: str = ""
    file_name: str = ""
    outcome: Optional[str] = None
    """"transferred", "skipped" or "failed" for FILE_COMPLETE events"""

    file_size: int = 0


SyncProgressListener = Callable[[SyncProgressInfo], None]


class SyncProgressTracker:
    """Fans session events out to subscribed listeners."""

    def __init__(self, callback: Optional[SyncProgressListener] = None):
        self._listeners: list[SyncProgressListener] = []
        if callback is not None:
            self._listeners.append(callback)

    def subscribe(self, listener: SyncProgressListener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, info: SyncProgressInfo) -> None:
        """Send an event to all listeners.

        A failing listener is logged and does not stop the session.
        """
        for listener in list(self._listeners):
            try:
                listener(info)
            except Exception:
                logger.exception(f"Progress listener failed on {info.event.value}")
