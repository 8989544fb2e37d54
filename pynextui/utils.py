"""Utility functions for pynextui."""

import posixpath

# =============================================================================
# Device layout
# =============================================================================

# Base path for NextUI on TrimUI devices
NEXTUI_BASE_PATH: str = "/mnt/SDCARD"

DEVICE_PATHS: dict[str, str] = {
    "base": NEXTUI_BASE_PATH,
    "bios": f"{NEXTUI_BASE_PATH}/Bios",
    "roms": f"{NEXTUI_BASE_PATH}/Roms",
    "userdata": f"{NEXTUI_BASE_PATH}/.userdata",
    "system": f"{NEXTUI_BASE_PATH}/.system",
    "version_file": f"{NEXTUI_BASE_PATH}/.system/version.txt",
    "overlays": f"{NEXTUI_BASE_PATH}/Overlays",
    "minui_zip": f"{NEXTUI_BASE_PATH}/MinUI.zip",
}

# Name of the per-system folder holding box art and other media
DEFAULT_MEDIA_DIR: str = ".media"

# Default permission for files pushed to the device
DEFAULT_FILE_MODE: int = 0o644


# =============================================================================
# Path utilities
# =============================================================================


def join_path(base: str, *names: str) -> str:
    """Join device path components, avoiding double slashes at root.

    Args:
        base: Base device path (e.g. "/mnt/SDCARD/Roms")
        *names: Path components to append

    Returns:
        Joined POSIX path

    Examples:
        >>> join_path("/", "Roms")
        '/Roms'
        >>> join_path("/mnt/SDCARD/Roms", "Game Boy (GB)", "a.gb")
        '/mnt/SDCARD/Roms/Game Boy (GB)/a.gb'
    """
    return posixpath.join(base, *names)


def is_dot_file(name: str) -> bool:
    """Return True for hidden entries such as .DS_Store or ._a.gb."""
    return name.startswith(".")


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.2f} GB"
