"""Remote filesystem backed by the adb command line tool."""

import logging
import os
import posixpath
import shlex
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Optional

from ..exceptions import (
    AdbNotFoundError,
    DeviceNotFoundError,
    DeviceTransferError,
)
from ..utils import DEFAULT_FILE_MODE
from .base import DirectoryEntry

logger = logging.getLogger(__name__)

# Printed by list_directory when the directory is absent
_NOT_FOUND_MARKER = "__PYNEXTUI_NOT_FOUND__"


class AdbDevice:
    """A NextUI device reached through ``adb``.

    All device commands are built with every argument quoted through
    ``shlex.quote``, so paths containing spaces, parentheses or quotes are
    passed verbatim to the device shell.

    Examples:
        >>> device = AdbDevice(serial="0123456789")
        >>> [e.name for e in device.list_directory("/mnt/SDCARD/Roms")]
        ['Game Boy (GB)', 'Sega Genesis (MD)']
    """

    def __init__(
        self,
        adb_path: Optional[str] = None,
        serial: Optional[str] = None,
        timeout: float = 30.0,
        transfer_timeout: float = 600.0,
    ):
        """Initialize the adb device.

        Args:
            adb_path: Path to the adb executable (searched on PATH if omitted)
            serial: Device serial, required when several devices are attached
            timeout: Timeout in seconds for shell commands
            transfer_timeout: Timeout in seconds for push/pull of one file
        """
        self.adb_path = self._find_adb(adb_path)
        self.serial = serial
        self.timeout = timeout
        self.transfer_timeout = transfer_timeout

    @staticmethod
    def _find_adb(adb_path: Optional[str]) -> str:
        """Locate the adb executable, preferring an explicit path."""
        if adb_path:
            if os.path.exists(adb_path):
                logger.debug(f"Using configured adb: {adb_path}")
                return adb_path
            raise AdbNotFoundError(f"adb not found at configured path: {adb_path}")

        found = shutil.which("adb")
        if found:
            logger.debug(f"Found adb in PATH: {found}")
            return found

        raise AdbNotFoundError(
            "adb not found. Install Android platform-tools or set NEXTUI_ADB_PATH."
        )

    def _adb_cmd(self, *args: str) -> list[str]:
        """Build an adb command line with the device specifier if needed."""
        cmd = [self.adb_path]
        if self.serial:
            cmd.extend(["-s", self.serial])
        cmd.extend(args)
        return cmd

    def _run(self, args: list[str], timeout: float) -> subprocess.CompletedProcess:
        """Run an adb command, converting launch failures to DeviceTransferError."""
        logger.debug(f"adb {' '.join(args[1:])}")
        try:
            return subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout,
                creationflags=(
                    subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0
                ),
            )
        except subprocess.TimeoutExpired as e:
            raise DeviceTransferError(f"adb timed out after {timeout}s") from e
        except (subprocess.SubprocessError, OSError) as e:
            raise DeviceTransferError(f"Failed to run adb: {e}") from e

    @staticmethod
    def _decode(data: bytes) -> str:
        return data.decode("utf-8", errors="replace")

    def shell(self, command: str) -> str:
        """Run a shell command on the device and return stdout.

        Raises:
            DeviceTransferError: If the command exits with a non-zero status
        """
        result = self._run(self._adb_cmd("shell", command), self.timeout)
        if result.returncode != 0:
            error = self._decode(result.stderr).strip() or self._decode(
                result.stdout
            ).strip()
            raise DeviceTransferError(f"Shell command failed: {command}: {error}")
        return self._decode(result.stdout)

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List the direct children of a device directory.

        Raises:
            DeviceNotFoundError: If the directory does not exist
        """
        quoted = shlex.quote(path)
        command = (
            f"if [ -d {quoted} ]; then "
            f"find {quoted} -mindepth 1 -maxdepth 1 "
            f"-exec stat -c '%s|%Y|%F|%n' {{}} \\; ; "
            f"else echo {_NOT_FOUND_MARKER}; fi"
        )
        output = self.shell(command)
        if output.strip() == _NOT_FOUND_MARKER:
            raise DeviceNotFoundError(f"Directory not found: {path}", path=path)

        entries: list[DirectoryEntry] = []
        for line in output.splitlines():
            parts = line.split("|", 3)
            if len(parts) != 4:
                continue
            size_str, mtime_str, file_type, full_path = parts
            try:
                size = int(size_str)
                mtime: Optional[float] = float(mtime_str)
            except ValueError:
                logger.debug(f"Unparseable stat line: {line!r}")
                continue
            entries.append(
                DirectoryEntry(
                    name=posixpath.basename(full_path),
                    size=size,
                    is_file=file_type.startswith("regular"),
                    is_directory=file_type == "directory",
                    mtime=mtime,
                )
            )

        logger.debug(f"Listed {path} ({len(entries)} entries)")
        return entries

    def exists(self, path: str) -> bool:
        """Check if a file or directory exists on the device."""
        output = self.shell(f"[ -e {shlex.quote(path)} ] && echo yes || echo no")
        return output.strip() == "yes"

    def ensure_directory(self, path: str) -> None:
        """Create a directory (and parents) on the device."""
        self.shell(f"mkdir -p {shlex.quote(path)}")

    def write_file(
        self, path: str, data: bytes, mode: int = DEFAULT_FILE_MODE
    ) -> None:
        """Push bytes to a file on the device.

        The data is staged in a temporary file because ``adb push`` only
        accepts local paths.
        """
        logger.info(f"push -> {path} ({len(data)} bytes, perm={mode:o})")
        fd, tmp_name = tempfile.mkstemp(prefix="pynextui-")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)

            result = self._run(
                self._adb_cmd("push", tmp_name, path), self.transfer_timeout
            )
            if result.returncode != 0:
                error = self._decode(result.stderr).strip()
                logger.error(f"push failed for {path}: {error}")
                raise DeviceTransferError(f"Failed to write {path}: {error}", path=path)
        finally:
            Path(tmp_name).unlink(missing_ok=True)

        self.shell(f"chmod {mode:o} {shlex.quote(path)}")

    def read_file(self, path: str) -> bytes:
        """Pull a file from the device and return its content."""
        with tempfile.TemporaryDirectory(prefix="pynextui-") as tmp_dir:
            local_path = Path(tmp_dir) / "pulled"
            result = self._run(
                self._adb_cmd("pull", path, str(local_path)), self.transfer_timeout
            )
            if result.returncode != 0:
                error = self._decode(result.stderr).strip()
                if "No such file" in error or "does not exist" in error:
                    raise DeviceNotFoundError(f"File not found: {path}", path=path)
                raise DeviceTransferError(f"Failed to read {path}: {error}", path=path)
            return local_path.read_bytes()
