"""Folder-to-device ROM synchronization engine."""

from .classifier import classify_files
from .conflicts import ConflictResolver, PromptConflictResolver, StaticConflictResolver
from .executor import BatchTransferExecutor
from .models import (
    ConflictPolicy,
    ConflictRequest,
    ConflictResolution,
    FileStatus,
    SyncableFile,
    SyncableSystem,
    SyncCounters,
    SyncPhase,
    TransferOutcome,
)
from .probe import RemoteListing, RemoteTreeProbe
from .progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .scanner import (
    LocalDirectory,
    LocalFileHandle,
    LocalTreeScanner,
    PathDirectory,
    PathFileHandle,
    ScannedFile,
    ScannedSystem,
)
from .session import SyncSession

__all__ = [
    "BatchTransferExecutor",
    "ConflictPolicy",
    "ConflictRequest",
    "ConflictResolution",
    "ConflictResolver",
    "FileStatus",
    "LocalDirectory",
    "LocalFileHandle",
    "LocalTreeScanner",
    "PathDirectory",
    "PathFileHandle",
    "PromptConflictResolver",
    "RemoteListing",
    "RemoteTreeProbe",
    "ScannedFile",
    "ScannedSystem",
    "StaticConflictResolver",
    "SyncCounters",
    "SyncPhase",
    "SyncProgressEvent",
    "SyncProgressInfo",
    "SyncProgressTracker",
    "SyncSession",
    "SyncableFile",
    "SyncableSystem",
    "TransferOutcome",
    "classify_files",
]
