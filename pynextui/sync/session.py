"""Synchronization session: scan, review, transfer, done."""

import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional, Union

from ..device.base import RemoteFileSystem
from ..exceptions import SyncPhaseError
from ..utils import DEFAULT_MEDIA_DIR, DEVICE_PATHS
from .classifier import classify_files
from .executor import BatchTransferExecutor
from .models import (
    ConflictPolicy,
    SyncableFile,
    SyncableSystem,
    SyncCounters,
    SyncPhase,
    TransferOutcome,
)
from .probe import RemoteTreeProbe
from .progress import (
    SyncProgressEvent,
    SyncProgressInfo,
    SyncProgressListener,
    SyncProgressTracker,
)
from .scanner import LocalDirectory, LocalTreeScanner

if TYPE_CHECKING:
    from pathlib import Path

    from .conflicts import ConflictResolver

logger = logging.getLogger(__name__)

SystemRef = Union[SyncableSystem, str]


class SyncSession:
    """One run of the folder-to-device ROM sync.

    A session moves through SCANNING -> REVIEW -> SYNCING -> DONE and is
    never reused: a new sync always starts with a new session, so state is
    re-derived from the local folder and the device every time.

    During REVIEW the selection can be changed freely. Once the transfer
    starts, the file list is read-only and only the counters change.

    Examples:
        >>> session = SyncSession(device)
        >>> session.scan(Path("/home/user/roms"))
        >>> session.new_count, session.existing_count
        (12, 3)
        >>> session.start_transfer(PromptConflictResolver(out))
        True
        >>> session.counters.transferred
        12
    """

    def __init__(
        self,
        device: RemoteFileSystem,
        roms_path: str = DEVICE_PATHS["roms"],
        media_dir_name: str = DEFAULT_MEDIA_DIR,
        on_refresh: Optional[Callable[[], None]] = None,
    ):
        """Initialize a session in the SCANNING phase.

        Args:
            device: Device to compare against and write to
            roms_path: Device folder holding the system folders
            media_dir_name: Name of the per-system media subfolder
            on_refresh: Called by exit() so the caller can reload its view
        """
        self.device = device
        self.roms_path = roms_path
        self.media_dir_name = media_dir_name
        self.on_refresh = on_refresh

        self.phase = SyncPhase.SCANNING
        self.systems: list[SyncableSystem] = []
        self.counters = SyncCounters()
        self.conflict_policy = ConflictPolicy.ASK
        self.current_system = ""
        self.current_file = ""

        self._tracker = SyncProgressTracker()
        self._scan_started = False

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def subscribe(self, listener: SyncProgressListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes."""
        return self._tracker.subscribe(listener)

    def _emit(
        self,
        event: SyncProgressEvent,
        system_dir: str = "",
        file_name: str = "",
        outcome: Optional[TransferOutcome] = None,
        file_size: int = 0,
    ) -> None:
        self._tracker.emit(
            SyncProgressInfo(
                event=event,
                phase=self.phase,
                counters=SyncCounters(**self.counters.to_dict()),
                system_dir=system_dir,
                file_name=file_name,
                outcome=outcome.value if outcome else None,
                file_size=file_size,
            )
        )

    def _set_phase(self, phase: SyncPhase) -> None:
        logger.debug(f"Session phase {self.phase.value} -> {phase.value}")
        self.phase = phase
        self._emit(SyncProgressEvent.PHASE_CHANGED)

    def _require_phase(self, *phases: SyncPhase) -> None:
        if self.phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise SyncPhaseError(
                f"Operation requires phase {allowed}, session is {self.phase.value}"
            )

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(self, local_root: Union[str, "Path", LocalDirectory]) -> None:
        """Scan the local root, probe the device and classify every file.

        Raises:
            NoSystemDirectoriesError: If the root has no system folders; the
                session then never reaches REVIEW
            SyncPhaseError: If this session has already scanned
        """
        self._require_phase(SyncPhase.SCANNING)
        if self._scan_started:
            raise SyncPhaseError("A session can only scan once; start a new session")
        self._scan_started = True

        scanner = LocalTreeScanner(media_dir_name=self.media_dir_name)
        probe = RemoteTreeProbe(
            self.device, roms_path=self.roms_path, media_dir_name=self.media_dir_name
        )

        scanned = scanner.scan(local_root)
        systems: list[SyncableSystem] = []
        for local_system in scanned:
            listing = probe.probe(local_system.dir_name)
            files = classify_files(local_system.files, listing.root, listing.media)
            systems.append(SyncableSystem(dir_name=local_system.dir_name, files=files))

        self.systems = sorted(systems, key=lambda s: s.dir_name.lower())
        logger.info(
            f"Scan complete: {self.new_count} new, {self.existing_count} existing "
            f"in {len(self.systems)} system(s)"
        )
        self._set_phase(SyncPhase.REVIEW)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_system(self, system: SystemRef) -> SyncableSystem:
        """Return the session's system for an object or folder name."""
        dir_name = system.dir_name if isinstance(system, SyncableSystem) else system
        for candidate in self.systems:
            if candidate.dir_name == dir_name:
                return candidate
        raise KeyError(f"Unknown system: {dir_name}")

    def get_file(
        self, system: SystemRef, file: Union[SyncableFile, str], is_media: bool = False
    ) -> SyncableFile:
        """Return the session's file by object or by (name, is_media)."""
        sys_obj = self.get_system(system)
        if isinstance(file, SyncableFile):
            key = file.key
        else:
            key = (is_media, file)
        for candidate in sys_obj.files:
            if candidate.key == key:
                return candidate
        raise KeyError(f"Unknown file in {sys_obj.dir_name}: {key[1]}")

    # ------------------------------------------------------------------
    # Selection (REVIEW only)
    # ------------------------------------------------------------------

    def toggle_file(
        self, system: SystemRef, file: Union[SyncableFile, str], is_media: bool = False
    ) -> bool:
        """Flip the selection of one file and return its new state."""
        self._require_phase(SyncPhase.REVIEW)
        target = self.get_file(system, file, is_media=is_media)
        target.selected = not target.selected
        self._emit(SyncProgressEvent.SELECTION_CHANGED)
        return target.selected

    def select_all_new(self) -> None:
        """Select every NEW file in every system."""
        self._require_phase(SyncPhase.REVIEW)
        for system in self.systems:
            self._select_new(system)
        self._emit(SyncProgressEvent.SELECTION_CHANGED)

    def select_all_new_in_system(self, system: SystemRef) -> None:
        """Select every NEW file in one system."""
        self._require_phase(SyncPhase.REVIEW)
        self._select_new(self.get_system(system))
        self._emit(SyncProgressEvent.SELECTION_CHANGED)

    def select_all_in_system(self, system: SystemRef) -> None:
        """Select every file in one system, including existing ones."""
        self._require_phase(SyncPhase.REVIEW)
        for f in self.get_system(system).files:
            f.selected = True
        self._emit(SyncProgressEvent.SELECTION_CHANGED)

    def deselect_system(self, system: SystemRef) -> None:
        """Deselect every file in one system."""
        self._require_phase(SyncPhase.REVIEW)
        for f in self.get_system(system).files:
            f.selected = False
        self._emit(SyncProgressEvent.SELECTION_CHANGED)

    @staticmethod
    def _select_new(system: SyncableSystem) -> None:
        for f in system.files:
            if f.is_new:
                f.selected = True

    # ------------------------------------------------------------------
    # Derived counts
    # ------------------------------------------------------------------

    def system_new_count(self, system: SystemRef) -> int:
        return sum(1 for f in self.get_system(system).files if f.is_new)

    def system_existing_count(self, system: SystemRef) -> int:
        return sum(1 for f in self.get_system(system).files if not f.is_new)

    def system_selected_count(self, system: SystemRef) -> int:
        return sum(1 for f in self.get_system(system).files if f.selected)

    @property
    def new_count(self) -> int:
        return sum(self.system_new_count(s) for s in self.systems)

    @property
    def existing_count(self) -> int:
        return sum(self.system_existing_count(s) for s in self.systems)

    @property
    def selected_count(self) -> int:
        return sum(self.system_selected_count(s) for s in self.systems)

    def selected_items(self) -> list[tuple[SyncableSystem, SyncableFile]]:
        """Selected files in transfer order: systems sorted, files as scanned."""
        return [(s, f) for s in self.systems for f in s.files if f.selected]

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------

    def start_transfer(
        self,
        resolver: "ConflictResolver",
        cancel_event: Optional[threading.Event] = None,
    ) -> bool:
        """Transfer the selected files and move to DONE.

        Args:
            resolver: Answers conflicts while the policy is ASK
            cancel_event: Optional event checked between files

        Returns:
            False if nothing is selected (the session stays in REVIEW),
            True once the transfer has finished
        """
        self._require_phase(SyncPhase.REVIEW)
        if self.selected_count == 0:
            logger.warning("No files selected; nothing to transfer")
            return False

        self.counters = SyncCounters(
            total=self.selected_count,
            bytes_total=sum(f.local_size for _, f in self.selected_items()),
        )
        self.conflict_policy = ConflictPolicy.ASK
        self._set_phase(SyncPhase.SYNCING)

        executor = BatchTransferExecutor(
            self.device,
            roms_path=self.roms_path,
            media_dir_name=self.media_dir_name,
            cancel_event=cancel_event,
        )
        executor.run(self, resolver)

        self.current_system = ""
        self.current_file = ""
        logger.info(
            f"Transfer complete: {self.counters.transferred} transferred, "
            f"{self.counters.skipped} skipped, {self.counters.failed} failed"
        )
        self._set_phase(SyncPhase.DONE)
        return True

    def set_conflict_policy(self, policy: ConflictPolicy) -> None:
        """Change the conflict policy for the remaining files (SYNCING only)."""
        self._require_phase(SyncPhase.SYNCING)
        if policy != self.conflict_policy:
            logger.info(f"Conflict policy set to {policy.value}")
            self.conflict_policy = policy
            self._emit(SyncProgressEvent.POLICY_CHANGED)

    def record_start(self, system: SyncableSystem, file: SyncableFile) -> None:
        """Mark a file as the current transfer item."""
        self._require_phase(SyncPhase.SYNCING)
        self.current_system = system.dir_name
        self.current_file = file.name
        self._emit(
            SyncProgressEvent.FILE_START,
            system_dir=system.dir_name,
            file_name=file.name,
            file_size=file.local_size,
        )

    def record_outcome(
        self, system: SyncableSystem, file: SyncableFile, outcome: TransferOutcome
    ) -> None:
        """Count the outcome of one file; completed grows by exactly one."""
        self._require_phase(SyncPhase.SYNCING)
        if outcome == TransferOutcome.TRANSFERRED:
            self.counters.transferred += 1
            self.counters.bytes_transferred += file.local_size
        elif outcome == TransferOutcome.SKIPPED:
            self.counters.skipped += 1
        else:
            self.counters.failed += 1
        self.counters.completed += 1
        self.counters.bytes_completed += file.local_size
        self.counters.check()
        self._emit(
            SyncProgressEvent.FILE_COMPLETE,
            system_dir=system.dir_name,
            file_name=file.name,
            outcome=outcome,
            file_size=file.local_size,
        )

    # ------------------------------------------------------------------
    # Exit
    # ------------------------------------------------------------------

    def exit(self) -> None:
        """Leave the session from REVIEW or DONE and request a view refresh."""
        self._require_phase(SyncPhase.REVIEW, SyncPhase.DONE)
        if self.on_refresh is not None:
            self.on_refresh()

    def to_dict(self) -> dict:
        """Serializable snapshot of the session."""
        return {
            "phase": self.phase.value,
            "conflict_policy": self.conflict_policy.value,
            "counters": self.counters.to_dict(),
            "new": self.new_count,
            "existing": self.existing_count,
            "selected": self.selected_count,
            "systems": [s.to_dict() for s in self.systems],
        }
