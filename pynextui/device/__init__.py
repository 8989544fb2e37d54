"""Device access for pynextui: adb transport and mounted SD cards."""

from .adb import AdbDevice
from .base import (
    DirectoryEntry,
    RemoteFileSystem,
    StorageInfo,
    VerifyResult,
    get_storage_info,
    parse_df_output,
    verify_installation,
)
from .mounted import MountedDevice

__all__ = [
    "AdbDevice",
    "DirectoryEntry",
    "MountedDevice",
    "RemoteFileSystem",
    "StorageInfo",
    "VerifyResult",
    "get_storage_info",
    "parse_df_output",
    "verify_installation",
]
