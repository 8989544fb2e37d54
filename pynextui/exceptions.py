"""Exception hierarchy for pynextui."""

from typing import Optional


class NextUIError(Exception):
    """Base exception for all pynextui errors."""


class NextUIConfigError(NextUIError):
    """Raised when configuration values are missing or invalid."""


class DeviceError(NextUIError):
    """Raised when the remote device rejects or fails an operation."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class AdbNotFoundError(DeviceError):
    """Raised when no adb executable can be located."""


class DeviceNotFoundError(DeviceError):
    """Raised when a path does not exist on the device."""


class DeviceTransferError(DeviceError):
    """Raised when a read, write, mkdir or shell call fails on the device."""


class SyncError(NextUIError):
    """Base exception for synchronization errors."""


class NoSystemDirectoriesError(SyncError):
    """Raised when a local root contains no recognizable system directories.

    This is a recoverable condition: the caller should show a notice and
    let the user pick another folder.
    """

    def __init__(self, root: str):
        super().__init__(
            f"No matching system directories found in {root}. "
            'Expected folders named like "Game Boy (GB)".'
        )
        self.root = root


class SyncPhaseError(SyncError):
    """Raised when a session operation is not valid in the current phase."""
