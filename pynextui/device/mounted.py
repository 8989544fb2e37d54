"""Remote filesystem backed by a locally mounted SD card."""

import logging
import os
import shutil
import subprocess
from pathlib import Path, PurePosixPath
from typing import Union

from ..exceptions import DeviceNotFoundError, DeviceTransferError
from ..utils import DEFAULT_FILE_MODE, NEXTUI_BASE_PATH
from .base import DirectoryEntry

logger = logging.getLogger(__name__)


class MountedDevice:
    """A NextUI SD card mounted on the local machine.

    Device paths under ``/mnt/SDCARD`` are mapped onto ``mount_point``, so
    ``/mnt/SDCARD/Roms/Game Boy (GB)`` resolves to
    ``<mount_point>/Roms/Game Boy (GB)``.
    """

    def __init__(
        self,
        mount_point: Union[str, Path],
        device_base: str = NEXTUI_BASE_PATH,
    ):
        self.mount_point = Path(mount_point)
        self.device_base = PurePosixPath(device_base)

    def _local_path(self, path: str) -> Path:
        """Translate a device path to a path under the mount point."""
        device_path = PurePosixPath(path)
        try:
            relative = device_path.relative_to(self.device_base)
        except ValueError:
            raise DeviceNotFoundError(
                f"Path is outside the device base {self.device_base}: {path}",
                path=path,
            ) from None
        if ".." in relative.parts:
            raise DeviceNotFoundError(f"Invalid device path: {path}", path=path)
        return self.mount_point.joinpath(*relative.parts)

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        local = self._local_path(path)
        if not local.is_dir():
            raise DeviceNotFoundError(f"Directory not found: {path}", path=path)

        try:
            with os.scandir(local) as it:
                items = list(it)
        except OSError as e:
            raise DeviceTransferError(f"Failed to list {path}: {e}", path=path) from e

        entries: list[DirectoryEntry] = []
        for item in items:
            try:
                stat = item.stat()
                is_file = item.is_file()
                is_directory = item.is_dir()
            except OSError as e:
                # Dangling symlinks and unreadable entries
                logger.warning(f"Skipping unreadable entry {path}/{item.name}: {e}")
                continue
            entries.append(
                DirectoryEntry(
                    name=item.name,
                    size=stat.st_size,
                    is_file=is_file,
                    is_directory=is_directory,
                    mtime=stat.st_mtime,
                )
            )
        return entries

    def exists(self, path: str) -> bool:
        try:
            return self._local_path(path).exists()
        except DeviceNotFoundError:
            return False

    def ensure_directory(self, path: str) -> None:
        try:
            self._local_path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DeviceTransferError(
                f"Failed to create directory {path}: {e}", path=path
            ) from e

    def read_file(self, path: str) -> bytes:
        local = self._local_path(path)
        if not local.is_file():
            raise DeviceNotFoundError(f"File not found: {path}", path=path)
        try:
            return local.read_bytes()
        except OSError as e:
            raise DeviceTransferError(f"Failed to read {path}: {e}", path=path) from e

    def write_file(
        self, path: str, data: bytes, mode: int = DEFAULT_FILE_MODE
    ) -> None:
        local = self._local_path(path)
        logger.info(f"write -> {local} ({len(data)} bytes)")
        try:
            local.write_bytes(data)
            os.chmod(local, mode)
        except OSError as e:
            raise DeviceTransferError(f"Failed to write {path}: {e}", path=path) from e

    def shell(self, command: str) -> str:
        """Run a command against the mount point using the local shell.

        The device base path in the command is rewritten to the mount point,
        which is enough for read-only commands such as ``df``.
        """
        if shutil.which("sh") is None:
            raise DeviceTransferError("No local shell available")
        local_command = command.replace(str(self.device_base), str(self.mount_point))
        result = subprocess.run(
            ["sh", "-c", local_command],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        if result.returncode != 0:
            error = result.stderr.decode("utf-8", errors="replace").strip()
            raise DeviceTransferError(f"Shell command failed: {command}: {error}")
        return result.stdout.decode("utf-8", errors="replace")
