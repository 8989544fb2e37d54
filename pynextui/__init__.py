"""pynextui - manage ROM collections on NextUI handhelds."""

from .device import AdbDevice, MountedDevice
from .exceptions import (
    AdbNotFoundError,
    DeviceError,
    DeviceNotFoundError,
    DeviceTransferError,
    NextUIConfigError,
    NextUIError,
    NoSystemDirectoriesError,
    SyncError,
    SyncPhaseError,
)
from .sync import SyncSession
from .utils import format_size

__all__ = [
    "AdbDevice",
    "MountedDevice",
    "SyncSession",
    "AdbNotFoundError",
    "DeviceError",
    "DeviceNotFoundError",
    "DeviceTransferError",
    "NextUIConfigError",
    "NextUIError",
    "NoSystemDirectoriesError",
    "SyncError",
    "SyncPhaseError",
    "format_size",
]
