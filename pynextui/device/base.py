"""Remote filesystem protocol and device-level helpers."""

import logging
import re
import shlex
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from ..exceptions import DeviceError
from ..utils import DEFAULT_FILE_MODE, DEVICE_PATHS

logger = logging.getLogger(__name__)


@dataclass
class DirectoryEntry:
    """A single entry of a device directory listing."""

    name: str
    size: int
    is_file: bool
    is_directory: bool
    mtime: Optional[float] = None


@dataclass
class StorageInfo:
    """Storage capacity of the SD card."""

    total_bytes: int
    used_bytes: int
    available_bytes: int


@dataclass
class VerifyResult:
    """Outcome of an installation check."""

    ok: bool
    error: Optional[str] = None
    version: Optional[str] = None


@runtime_checkable
class RemoteFileSystem(Protocol):
    """Primitives offered by a connected device.

    Every call blocks until the device answers. Implementations multiplex
    all calls over a single transport, so callers issue them one at a time.
    """

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List a directory; raises DeviceNotFoundError if it is missing."""
        ...

    def exists(self, path: str) -> bool:
        """Check whether a path exists on the device."""
        ...

    def ensure_directory(self, path: str) -> None:
        """Create a directory and its parents if missing."""
        ...

    def read_file(self, path: str) -> bytes:
        """Read a whole file from the device."""
        ...

    def write_file(self, path: str, data: bytes, mode: int = DEFAULT_FILE_MODE) -> None:
        """Write a whole file to the device, replacing any existing file."""
        ...

    def shell(self, command: str) -> str:
        """Run one shell command on the device and return its stdout."""
        ...


def verify_installation(device: RemoteFileSystem) -> VerifyResult:
    """Verify that a NextUI installation exists on the device.

    Checks for the base path, the Bios and Roms directories and a version
    indicator (MinUI.zip or .system/version.txt).
    """
    for key, label in (
        ("base", "NextUI installation"),
        ("bios", "BIOS directory"),
        ("roms", "ROMs directory"),
    ):
        if not device.exists(DEVICE_PATHS[key]):
            return VerifyResult(ok=False, error=f"{label} not found at {DEVICE_PATHS[key]}")

    has_version_file = device.exists(DEVICE_PATHS["version_file"])
    has_minui = device.exists(DEVICE_PATHS["minui_zip"])
    if not has_version_file and not has_minui:
        return VerifyResult(
            ok=False,
            error="NextUI version file not found. "
            "Please ensure NextUI is properly installed.",
        )

    version = None
    if has_version_file:
        try:
            version = device.read_file(DEVICE_PATHS["version_file"]).decode(
                "utf-8", errors="replace"
            )
            version = version.strip() or None
        except DeviceError as e:
            logger.warning(f"Could not read version.txt: {e}")

    return VerifyResult(ok=True, version=version)


def parse_df_output(output: str) -> Optional[StorageInfo]:
    """Parse ``df`` output into StorageInfo.

    Handles BusyBox and GNU headers by locating the size, used and
    available columns; falls back to positional columns otherwise.
    Values are reported by df in 1K blocks.
    """
    lines = [line for line in output.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        return None

    header = lines[0].split()
    parts = lines[-1].split()

    def find_column(pattern: str) -> int:
        for idx, name in enumerate(header):
            if re.search(pattern, name, re.IGNORECASE):
                return idx
        return -1

    col_total = find_column(r"1k-blocks|1024-blocks|size")
    col_used = find_column(r"^used$")
    col_avail = find_column(r"^avail")
    if col_total < 0 or col_used < 0 or col_avail < 0:
        col_total, col_used, col_avail = 1, 2, 3

    try:
        total_kb = int(parts[col_total])
        used_kb = int(parts[col_used])
        available_kb = int(parts[col_avail])
    except (IndexError, ValueError):
        return None

    return StorageInfo(
        total_bytes=total_kb * 1024,
        used_bytes=used_kb * 1024,
        available_bytes=available_kb * 1024,
    )


def get_storage_info(device: RemoteFileSystem) -> Optional[StorageInfo]:
    """Get SD card storage information, or None if unavailable."""
    try:
        output = device.shell(f"df {shlex.quote(DEVICE_PATHS['base'])}")
    except DeviceError as e:
        logger.debug(f"df failed: {e}")
        return None
    return parse_df_output(output)
