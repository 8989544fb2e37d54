"""Data model for folder-to-device ROM synchronization."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .scanner import LocalFileHandle


class FileStatus(str, Enum):
    """Classification of a local file against the device."""

    NEW = "new"
    """No file with the same name in the same bucket on the device"""

    EXISTS = "exists"
    """A same-named file exists on the device and would be overwritten"""


class SyncPhase(str, Enum):
    """Phases of a synchronization session."""

    SCANNING = "scanning"
    REVIEW = "review"
    SYNCING = "syncing"
    DONE = "done"


class ConflictPolicy(str, Enum):
    """How conflicts are handled for the rest of a transfer."""

    ASK = "ask"
    OVERWRITE_ALL = "overwrite-all"
    SKIP_ALL = "skip-all"


class ConflictResolution(str, Enum):
    """Answer to a single conflict prompt."""

    OVERWRITE = "overwrite"
    """Overwrite this file only"""

    SKIP = "skip"
    """Skip this file only"""

    OVERWRITE_ALL = "overwrite-all"
    """Overwrite this file and every later conflict without asking"""

    SKIP_ALL = "skip-all"
    """Skip this file and every later conflict without asking"""


class TransferOutcome(str, Enum):
    """Result of processing one selected file."""

    TRANSFERRED = "transferred"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SyncableFile:
    """One candidate file for transfer."""

    name: str
    """File name without path"""

    is_media: bool
    """True if the file lives in the system's media subfolder"""

    local_size: int
    """Size of the local file in bytes"""

    source: "LocalFileHandle" = field(repr=False, compare=False)
    """Handle used to read the local bytes at transfer time"""

    device_size: Optional[int] = None
    """Size on the device, None if the file is absent there"""

    selected: bool = True
    """Whether the file will be transferred"""

    @property
    def status(self) -> FileStatus:
        """NEW or EXISTS, derived from device_size."""
        return FileStatus.NEW if self.device_size is None else FileStatus.EXISTS

    @property
    def is_new(self) -> bool:
        return self.device_size is None

    @property
    def key(self) -> tuple[bool, str]:
        """Identity of the file inside its system."""
        return (self.is_media, self.name)

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON output."""
        return {
            "name": self.name,
            "is_media": self.is_media,
            "local_size": self.local_size,
            "device_size": self.device_size,
            "status": self.status.value,
            "selected": self.selected,
        }


@dataclass
class SyncableSystem:
    """One system directory with its candidate files."""

    dir_name: str
    """Folder name shared by the local and device trees"""

    files: list[SyncableFile] = field(default_factory=list)
    """Files in discovery order"""

    expanded: bool = False
    """Display-only flag for UIs"""

    def to_dict(self) -> dict:
        return {
            "dir_name": self.dir_name,
            "files": [f.to_dict() for f in self.files],
        }


@dataclass
class SyncCounters:
    """Progress counters of a transfer."""

    completed: int = 0
    total: int = 0
    transferred: int = 0
    skipped: int = 0
    failed: int = 0

    bytes_total: int = 0
    """Local size of all selected files"""

    bytes_completed: int = 0
    """Local size of processed files, whatever their outcome"""

    bytes_transferred: int = 0
    """Local size of files actually written to the device"""

    @property
    def is_consistent(self) -> bool:
        """True if completed <= total and the outcome counts add up."""
        return (
            0 <= self.completed <= self.total
            and self.transferred + self.skipped + self.failed == self.completed
            and 0 <= self.bytes_transferred <= self.bytes_completed <= self.bytes_total
        )

    def check(self) -> None:
        """Raise RuntimeError if the counter invariants are violated."""
        if not self.is_consistent:
            raise RuntimeError(f"Inconsistent sync counters: {self}")

    def to_dict(self) -> dict:
        return {
            "completed": self.completed,
            "total": self.total,
            "transferred": self.transferred,
            "skipped": self.skipped,
            "failed": self.failed,
            "bytes_total": self.bytes_total,
            "bytes_completed": self.bytes_completed,
            "bytes_transferred": self.bytes_transferred,
        }


@dataclass(frozen=True)
class ConflictRequest:
    """A question posed to the conflict resolver."""

    system_dir: str
    file_name: str
    local_size: int
    device_size: int
    is_media: bool = False
