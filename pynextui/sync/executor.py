"""Sequential transfer of selected files to the device."""

import logging
import threading
import time
from typing import TYPE_CHECKING, Optional

from ..device.base import RemoteFileSystem
from ..utils import DEFAULT_MEDIA_DIR, DEVICE_PATHS, join_path
from .models import (
    ConflictPolicy,
    ConflictRequest,
    ConflictResolution,
    SyncableFile,
    SyncableSystem,
    TransferOutcome,
)

if TYPE_CHECKING:
    from .conflicts import ConflictResolver
    from .session import SyncSession

logger = logging.getLogger(__name__)


class BatchTransferExecutor:
    """Pushes a session's selected files to the device one at a time.

    Files that already exist on the device are resolved against the
    session's conflict policy, asking the resolver while the policy is ASK.
    A failure on one file is counted and logged, and the loop moves on to
    the next file; nothing raised by the device or the local handle stops
    the batch.
    """

    def __init__(
        self,
        device: RemoteFileSystem,
        roms_path: str = DEVICE_PATHS["roms"],
        media_dir_name: str = DEFAULT_MEDIA_DIR,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize the executor.

        Args:
            device: Device to write to
            roms_path: Device folder holding the system folders
            media_dir_name: Name of the per-system media subfolder
            cancel_event: When set, remaining files are skipped
        """
        self.device = device
        self.roms_path = roms_path
        self.media_dir_name = media_dir_name
        self.cancel_event = cancel_event

    def destination_dir(self, system: SyncableSystem, file: SyncableFile) -> str:
        """Device folder a file is written to."""
        system_path = join_path(self.roms_path, system.dir_name)
        if file.is_media:
            return join_path(system_path, self.media_dir_name)
        return system_path

    def run(self, session: "SyncSession", resolver: "ConflictResolver") -> None:
        """Process every selected file of the session in order."""
        items = session.selected_items()
        start_time = time.time()
        logger.debug(f"Starting transfer of {len(items)} file(s)")

        for system, file in items:
            if self.cancel_event is not None and self.cancel_event.is_set():
                logger.info(f"Transfer cancelled; skipping {system.dir_name}/{file.name}")
                session.record_outcome(system, file, TransferOutcome.SKIPPED)
                continue

            session.record_start(system, file)
            outcome = self._process_item(session, system, file, resolver)
            session.record_outcome(system, file, outcome)

        elapsed = time.time() - start_time
        logger.debug(f"Transfer of {len(items)} file(s) took {elapsed:.2f}s")

    def _process_item(
        self,
        session: "SyncSession",
        system: SyncableSystem,
        file: SyncableFile,
        resolver: "ConflictResolver",
    ) -> TransferOutcome:
        if not file.is_new and not self._should_overwrite(
            session, system, file, resolver
        ):
            logger.debug(f"Skipping existing {system.dir_name}/{file.name}")
            return TransferOutcome.SKIPPED
        return self._transfer(system, file)

    def _should_overwrite(
        self,
        session: "SyncSession",
        system: SyncableSystem,
        file: SyncableFile,
        resolver: "ConflictResolver",
    ) -> bool:
        """Apply the conflict policy, asking the resolver when it is ASK."""
        if session.conflict_policy == ConflictPolicy.SKIP_ALL:
            return False
        if session.conflict_policy == ConflictPolicy.OVERWRITE_ALL:
            return True

        request = ConflictRequest(
            system_dir=system.dir_name,
            file_name=file.name,
            local_size=file.local_size,
            device_size=file.device_size or 0,
            is_media=file.is_media,
        )
        try:
            resolution = ConflictResolution(resolver.resolve(request))
        except Exception as e:
            # An unanswered conflict never overwrites device content
            logger.error(f"Conflict prompt failed for {system.dir_name}/{file.name}: {e}")
            return False
        logger.debug(f"Conflict on {system.dir_name}/{file.name}: {resolution.value}")

        if resolution == ConflictResolution.OVERWRITE_ALL:
            session.set_conflict_policy(ConflictPolicy.OVERWRITE_ALL)
            return True
        if resolution == ConflictResolution.SKIP_ALL:
            session.set_conflict_policy(ConflictPolicy.SKIP_ALL)
            return False
        return resolution == ConflictResolution.OVERWRITE

    def _transfer(self, system: SyncableSystem, file: SyncableFile) -> TransferOutcome:
        """Create the destination folder, read the local bytes and write them."""
        dest_dir = self.destination_dir(system, file)
        dest_path = join_path(dest_dir, file.name)
        try:
            self.device.ensure_directory(dest_dir)
            data = file.source.read_bytes()
            self.device.write_file(dest_path, data)
        except Exception as e:
            # Per-file failures never abort the batch
            logger.error(f"Failed to transfer {system.dir_name}/{file.name}: {e}")
            return TransferOutcome.FAILED

        logger.info(f"Transferred {system.dir_name}/{file.name} -> {dest_path}")
        return TransferOutcome.TRANSFERRED
