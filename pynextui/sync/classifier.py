"""Classification of local files against the device listing."""

from .models import SyncableFile
from .scanner import ScannedFile


def classify_files(
    local_files: list[ScannedFile],
    remote_root: dict[str, int],
    remote_media: dict[str, int],
) -> list[SyncableFile]:
    """Classify local files as new or already on the device.

    A file is looked up by name in the device map of its own bucket (root
    or media). Files found there are EXISTS and start deselected, since
    transferring them overwrites device content. Files not found are NEW
    and start selected.

    Args:
        local_files: Files of one system, in discovery order
        remote_root: Device files in the system folder (name to size)
        remote_media: Device files in the media subfolder (name to size)

    Returns:
        SyncableFile list in the same order as local_files
    """
    result: list[SyncableFile] = []
    for local in local_files:
        remote = remote_media if local.is_media else remote_root
        device_size = remote.get(local.name)
        result.append(
            SyncableFile(
                name=local.name,
                is_media=local.is_media,
                local_size=local.size,
                source=local.handle,
                device_size=device_size,
                selected=device_size is None,
            )
        )
    return result
