"""Device-side listing of system directories."""

import logging
from dataclasses import dataclass, field

from ..device.base import RemoteFileSystem
from ..exceptions import DeviceError
from ..utils import DEFAULT_MEDIA_DIR, DEVICE_PATHS, join_path

logger = logging.getLogger(__name__)


@dataclass
class RemoteListing:
    """Files of one system directory as seen on the device."""

    root: dict[str, int] = field(default_factory=dict)
    """Name to size for files directly in the system folder"""

    media: dict[str, int] = field(default_factory=dict)
    """Name to size for files in the media subfolder"""


class RemoteTreeProbe:
    """Lists the device folders that match local system directories.

    Folders are addressed by the same name as locally. A folder that is
    missing or cannot be listed counts as empty, so a system that exists
    only locally is classified as entirely new.
    """

    def __init__(
        self,
        device: RemoteFileSystem,
        roms_path: str = DEVICE_PATHS["roms"],
        media_dir_name: str = DEFAULT_MEDIA_DIR,
    ):
        self.device = device
        self.roms_path = roms_path
        self.media_dir_name = media_dir_name

    def probe(self, dir_name: str) -> RemoteListing:
        """List the root and media folders of one system on the device."""
        system_path = join_path(self.roms_path, dir_name)
        return RemoteListing(
            root=self._list_files(system_path),
            media=self._list_files(join_path(system_path, self.media_dir_name)),
        )

    def probe_all(self, dir_names: list[str]) -> dict[str, RemoteListing]:
        """Probe several systems one after another."""
        return {dir_name: self.probe(dir_name) for dir_name in dir_names}

    def _list_files(self, path: str) -> dict[str, int]:
        try:
            entries = self.device.list_directory(path)
        except DeviceError as e:
            logger.debug(f"Treating {path} as empty: {e}")
            return {}
        return {entry.name: entry.size for entry in entries if entry.is_file}
