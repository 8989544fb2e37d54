"""CLI progress display for ROM transfers.

This module provides a Rich-based progress display driven by the
change notifications of a SyncSession.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)

from .sync.conflicts import ConflictResolver
from .sync.models import ConflictRequest, ConflictResolution, SyncCounters
from .sync.progress import SyncProgressEvent, SyncProgressInfo
from .sync.session import SyncSession
from .utils import format_size


class SyncProgressDisplay:
    """Rich-based progress display for a transfer.

    The bar tracks the bytes of processed files against the selected total.
    The trailing column shows file and size progress plus the running
    transferred/skipped/failed tally.
    """

    def __init__(self, session: SyncSession) -> None:
        """Initialize the progress display.

        Args:
            session: Session whose events drive the display
        """
        self.session = session
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @staticmethod
    def _format_tally(counters: SyncCounters) -> str:
        """Format progress like "2/5 files, 1.5 MB/10.0 MB (2 sent, 0 skipped, 0 failed)"."""
        return (
            f"{counters.completed}/{counters.total} files, "
            f"{format_size(counters.bytes_completed)}/{format_size(counters.bytes_total)} "
            f"({counters.transferred} sent, {counters.skipped} skipped, "
            f"{counters.failed} failed)"
        )

    def _handle_event(self, info: SyncProgressInfo) -> None:
        """Handle a session event.

        Args:
            info: Progress information
        """
        if self._progress is None or self._task is None:
            return

        if info.event == SyncProgressEvent.FILE_START:
            self._progress.update(
                self._task,
                description=f"{info.system_dir}/{info.file_name}",
            )

        elif info.event == SyncProgressEvent.FILE_COMPLETE:
            self._progress.update(
                self._task,
                completed=info.counters.bytes_completed,
                total=info.counters.bytes_total,
                tally=self._format_tally(info.counters),
            )

        elif info.event == SyncProgressEvent.POLICY_CHANGED:
            self._progress.console.log(
                f"Conflict policy: {self.session.conflict_policy.value}"
            )

    @contextmanager
    def pause(self) -> Iterator[None]:
        """Stop the live display for the duration of the block."""
        if self._progress is None:
            yield
            return
        self._progress.stop()
        try:
            yield
        finally:
            self._progress.start()

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TransferSpeedColumn(),
            TextColumn("[cyan]{task.fields[tally]}"),
            TimeElapsedColumn(),
            refresh_per_second=4,
        )
        self._progress.__enter__()

        bytes_total = sum(f.local_size for _, f in self.session.selected_items())
        self._task = self._progress.add_task(
            "Preparing transfer...",
            total=bytes_total,
            tally=self._format_tally(
                SyncCounters(total=self.session.selected_count, bytes_total=bytes_total)
            ),
        )
        self._unsubscribe = self.session.subscribe(self._handle_event)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._progress is not None:
            if self._task is not None:
                self._progress.update(self._task, description="Transfer complete")
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None


class _PausingResolver:
    """Stops the live display around each conflict prompt."""

    def __init__(self, resolver: ConflictResolver, display: SyncProgressDisplay):
        self._resolver = resolver
        self._display = display

    def resolve(self, request: ConflictRequest) -> ConflictResolution:
        with self._display.pause():
            return self._resolver.resolve(request)


def run_transfer_with_progress(
    session: SyncSession, resolver: ConflictResolver
) -> bool:
    """Run a session's transfer with a Rich progress display.

    The progress bar is paused while the resolver prompts, so the question
    is not overwritten by the live display.

    Args:
        session: Session in the REVIEW phase
        resolver: Conflict resolver

    Returns:
        Result of session.start_transfer
    """
    with SyncProgressDisplay(session) as display:
        return session.start_transfer(_PausingResolver(resolver, display))
