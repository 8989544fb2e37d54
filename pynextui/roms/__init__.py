"""ROM system catalogue for NextUI devices."""

from .definitions import (
    ROM_SYSTEMS,
    RomDirectoryName,
    RomSystem,
    format_rom_directory_name,
    get_rom_device_path,
    get_rom_directory_name,
    get_rom_media_path,
    get_rom_system,
    is_valid_rom_extension,
    parse_rom_directory_name,
)

__all__ = [
    "ROM_SYSTEMS",
    "RomDirectoryName",
    "RomSystem",
    "format_rom_directory_name",
    "get_rom_device_path",
    "get_rom_directory_name",
    "get_rom_media_path",
    "get_rom_system",
    "is_valid_rom_extension",
    "parse_rom_directory_name",
]
