"""Local directory scanning for ROM synchronization."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Protocol, Union

from ..exceptions import NoSystemDirectoriesError
from ..roms import get_rom_system, is_valid_rom_extension, parse_rom_directory_name
from ..utils import DEFAULT_MEDIA_DIR, is_dot_file

logger = logging.getLogger(__name__)


class LocalFileHandle(Protocol):
    """A local file whose bytes are read only when needed."""

    name: str

    def size(self) -> int:
        """Size of the file in bytes."""
        ...

    def read_bytes(self) -> bytes:
        """Read the whole file."""
        ...


class LocalDirectory(Protocol):
    """A local directory that can be enumerated."""

    name: str

    def iter_directories(self) -> Iterator["LocalDirectory"]:
        """Yield the direct subdirectories."""
        ...

    def iter_files(self) -> Iterator[LocalFileHandle]:
        """Yield the direct child files."""
        ...

    def open_subdirectory(self, name: str) -> Optional["LocalDirectory"]:
        """Return the named subdirectory, or None if it doesn't exist."""
        ...


class PathFileHandle:
    """LocalFileHandle backed by a filesystem path."""

    def __init__(self, path: Path):
        self.path = path
        self.name = path.name

    def size(self) -> int:
        return self.path.stat().st_size

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def __repr__(self) -> str:
        return f"PathFileHandle({str(self.path)!r})"


class PathDirectory:
    """LocalDirectory backed by a filesystem path."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.name = self.path.name

    def _sorted_children(self) -> list[Path]:
        return sorted(self.path.iterdir(), key=lambda p: p.name)

    def iter_directories(self) -> Iterator["PathDirectory"]:
        for item in self._sorted_children():
            if item.is_dir():
                yield PathDirectory(item)

    def iter_files(self) -> Iterator[PathFileHandle]:
        for item in self._sorted_children():
            if item.is_file():
                yield PathFileHandle(item)

    def open_subdirectory(self, name: str) -> Optional["PathDirectory"]:
        sub = self.path / name
        return PathDirectory(sub) if sub.is_dir() else None

    def __repr__(self) -> str:
        return f"PathDirectory({str(self.path)!r})"


@dataclass
class ScannedFile:
    """A local file found during a scan, before device comparison."""

    name: str
    """File name without path"""

    size: int
    """File size in bytes"""

    is_media: bool
    """True if found in the media subfolder"""

    handle: LocalFileHandle = field(repr=False, compare=False)
    """Handle for reading the bytes at transfer time"""


@dataclass
class ScannedSystem:
    """A local system directory and its files."""

    dir_name: str
    files: list[ScannedFile] = field(default_factory=list)


class LocalTreeScanner:
    """Finds system directories in a local root and lists their files.

    Only the direct children of the root are considered. A child is a
    system directory if its name follows the "Display Name (CODE)"
    convention; other folders are ignored. Each system contributes its
    own non-hidden files plus the files of its media subfolder.

    Examples:
        >>> scanner = LocalTreeScanner()
        >>> systems = scanner.scan(Path("/home/user/roms"))
        >>> [s.dir_name for s in systems]
        ['Game Boy (GB)', 'Sega Genesis (MD)']
    """

    def __init__(self, media_dir_name: str = DEFAULT_MEDIA_DIR):
        """Initialize the scanner.

        Args:
            media_dir_name: Name of the per-system media subfolder
        """
        self.media_dir_name = media_dir_name

    def scan(self, root: Union[str, Path, LocalDirectory]) -> list[ScannedSystem]:
        """Scan a local root for system directories.

        Args:
            root: Local root directory (path or LocalDirectory)

        Returns:
            Systems with at least one file, in discovery order

        Raises:
            NoSystemDirectoriesError: If no system directory qualifies
        """
        if isinstance(root, (str, os.PathLike)):
            root = PathDirectory(root)

        systems: list[ScannedSystem] = []
        for directory in self._list_directories(root):
            if parse_rom_directory_name(directory.name) is None:
                logger.debug(f"Skipping non-system folder: {directory.name}")
                continue

            system = self._scan_system(directory)
            if not system.files:
                logger.debug(f"Skipping empty system folder: {directory.name}")
                continue
            systems.append(system)

        if not systems:
            raise NoSystemDirectoriesError(str(getattr(root, "path", root.name)))

        logger.info(
            f"Found {len(systems)} system folder(s) with "
            f"{sum(len(s.files) for s in systems)} file(s)"
        )
        return systems

    def _list_directories(self, root: LocalDirectory) -> list[LocalDirectory]:
        try:
            return list(root.iter_directories())
        except OSError as e:
            logger.warning(f"Cannot read {root.name}: {e}")
            return []

    def _scan_system(self, directory: LocalDirectory) -> ScannedSystem:
        """Collect root and media files of one system directory."""
        system = ScannedSystem(dir_name=directory.name)
        system.files.extend(self._scan_files(directory, is_media=False))

        try:
            media = directory.open_subdirectory(self.media_dir_name)
        except OSError as e:
            logger.warning(f"Cannot open {self.media_dir_name} in {directory.name}: {e}")
            media = None
        if media is not None:
            system.files.extend(self._scan_files(media, is_media=True))

        self._log_unsupported_extensions(system)
        return system

    def _scan_files(self, directory: LocalDirectory, is_media: bool) -> list[ScannedFile]:
        files: list[ScannedFile] = []
        try:
            handles = list(directory.iter_files())
        except OSError as e:
            logger.warning(f"Cannot list {directory.name}: {e}")
            return files

        for handle in handles:
            if is_dot_file(handle.name):
                continue
            try:
                size = handle.size()
            except OSError as e:
                # Skip files we can't stat
                logger.warning(f"Skipping unreadable file {handle.name}: {e}")
                continue
            files.append(
                ScannedFile(name=handle.name, size=size, is_media=is_media, handle=handle)
            )
        return files

    def _log_unsupported_extensions(self, system: ScannedSystem) -> None:
        """Note ROMs whose extension the known system does not list."""
        parsed = parse_rom_directory_name(system.dir_name)
        rom_system = get_rom_system(parsed.system_code) if parsed else None
        if rom_system is None:
            return
        for f in system.files:
            if f.is_media:
                continue
            extension = os.path.splitext(f.name)[1]
            if not is_valid_rom_extension(extension, rom_system):
                logger.debug(
                    f"{system.dir_name}/{f.name}: extension {extension or '(none)'} "
                    f"is not listed for {rom_system.system_code}"
                )
