"""ROM system definitions and the "Display Name (CODE)" folder convention."""

import re
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from ..utils import DEFAULT_MEDIA_DIR, DEVICE_PATHS, join_path

_ROM_DIR_PATTERN = re.compile(r"^(.+)\s+\(([^)]+)\)$")


@dataclass(frozen=True)
class RomSystem:
    """A ROM system known to NextUI."""

    system_name: str
    """Display name shown to the user (e.g. "NES/Famicom")"""

    system_code: str
    """System code used in folder names (e.g. "FC")"""

    supported_formats: tuple[str, ...] = field(default_factory=tuple)
    """Supported file extensions (lowercase, with dot)"""

    rom_path_system_name: Optional[str] = None
    """Name used in the ROM folder when it differs from system_name"""

    is_custom: bool = False
    """True if the system was discovered on the device rather than predefined"""

    @property
    def directory_name(self) -> str:
        """Folder name of this system, e.g. "Game Boy (GB)"."""
        return format_rom_directory_name(
            self.rom_path_system_name or self.system_name, self.system_code
        )


class RomDirectoryName(NamedTuple):
    """Parsed parts of a system folder name."""

    system_name: str
    system_code: str


ROM_SYSTEMS: list[RomSystem] = [
    RomSystem("Amiga", "PUAE", (".adf", ".ipf", ".dms", ".zip")),
    RomSystem("Amstrad CPC", "CPC", (".dsk", ".sna", ".tap", ".cdt", ".zip")),
    RomSystem("Arcade", "FBN", (".zip",)),
    RomSystem("Atari 2600", "A2600", (".a26", ".bin", ".zip")),
    RomSystem("Atari 5200", "A5200", (".a52", ".bin", ".zip")),
    RomSystem("Atari 7800", "A7800", (".a78", ".bin", ".zip")),
    RomSystem("Atari Lynx", "LYNX", (".lnx", ".zip")),
    RomSystem("Colecovision", "COLECO", (".col", ".rom", ".zip")),
    RomSystem(
        "Commodore 128",
        "C128",
        (".d64", ".d71", ".d80", ".d81", ".d82", ".g64", ".t64", ".tap", ".crt", ".zip"),
    ),
    RomSystem("Commodore 64", "C64", (".d64", ".t64", ".tap", ".crt", ".prg", ".zip")),
    RomSystem("Commodore PET", "PET", (".prg", ".d64", ".tap", ".zip")),
    RomSystem("Commodore Plus4", "PLUS4", (".d64", ".prg", ".tap", ".zip")),
    RomSystem("Commodore VIC20", "VIC", (".d64", ".prg", ".tap", ".crt", ".zip")),
    RomSystem("Doom", "PRBOOM", (".wad", ".zip")),
    RomSystem("Famicom Disk System", "FDS", (".fds", ".nes", ".zip")),
    RomSystem("Game Boy", "GB", (".gb", ".zip")),
    RomSystem("Game Boy Advance", "GBA", (".gba", ".zip")),
    RomSystem(
        "Game Boy Advance",
        "MGBA",
        (".gba", ".zip"),
        rom_path_system_name="Game Boy Advance",
    ),
    RomSystem("Game Boy Color", "GBC", (".gbc", ".gb", ".zip")),
    RomSystem("Microsoft MSX", "MSX", (".rom", ".mx1", ".mx2", ".dsk", ".zip")),
    RomSystem(
        "NES/Famicom",
        "FC",
        (".nes", ".fds", ".zip"),
        rom_path_system_name="Nintendo Entertainment System",
    ),
    RomSystem("Neo Geo Pocket", "NGP", (".ngp", ".ngc", ".zip")),
    RomSystem("Neo Geo Pocket Color", "NGPC", (".ngc", ".ngp", ".zip")),
    RomSystem(
        "PC Engine",
        "PCE",
        (".pce", ".cue", ".iso", ".chd", ".zip"),
        rom_path_system_name="TurboGrafx-16",
    ),
    RomSystem("Pico-8", "P8", (".p8", ".png")),
    RomSystem(
        "Pokemon mini",
        "PKM",
        (".min", ".zip"),
        rom_path_system_name="Pokémon mini",
    ),
    RomSystem("Sega 32X", "32X", (".32x", ".bin", ".zip")),
    RomSystem("Sega CD", "SEGACD", (".cue", ".iso", ".chd", ".zip")),
    RomSystem("Sega Game Gear", "GG", (".gg", ".zip")),
    RomSystem("Sega Genesis", "MD", (".md", ".gen", ".smd", ".zip")),
    RomSystem("Sega Master System", "SMS", (".sms", ".zip")),
    RomSystem("Sega SG-1000", "SG1000", (".sg", ".zip")),
    RomSystem(
        "SNES",
        "SFC",
        (".sfc", ".smc", ".zip"),
        rom_path_system_name="Super Nintendo Entertainment System",
    ),
    RomSystem(
        "SNES",
        "SUPA",
        (".sfc", ".smc", ".zip"),
        rom_path_system_name="Super Nintendo Entertainment System",
    ),
    RomSystem("Sony PlayStation", "PS", (".cue", ".iso", ".chd", ".pbp", ".zip")),
    RomSystem("Super Game Boy", "SGB", (".gb", ".gbc", ".zip")),
    RomSystem("Virtual Boy", "VB", (".vb", ".vboy", ".zip")),
]


def parse_rom_directory_name(dir_name: str) -> Optional[RomDirectoryName]:
    """Parse a system folder name into display name and system code.

    Args:
        dir_name: Folder name, e.g. "Game Boy (GB)"

    Returns:
        RomDirectoryName, or None if the name doesn't follow the convention

    Examples:
        >>> parse_rom_directory_name("Game Boy (GB)")
        RomDirectoryName(system_name='Game Boy', system_code='GB')
        >>> parse_rom_directory_name("Screenshots") is None
        True
    """
    match = _ROM_DIR_PATTERN.match(dir_name)
    if not match:
        return None
    return RomDirectoryName(system_name=match.group(1), system_code=match.group(2))


def format_rom_directory_name(system_name: str, system_code: str) -> str:
    """Build a folder name following the "Display Name (CODE)" convention."""
    return f"{system_name} ({system_code})"


def get_rom_system(system_code: str) -> Optional[RomSystem]:
    """Get a ROM system by its system code."""
    for system in ROM_SYSTEMS:
        if system.system_code == system_code:
            return system
    return None


def get_rom_directory_name(system_code: str) -> Optional[str]:
    """Get the folder name for a system code, or None if the code is unknown."""
    system = get_rom_system(system_code)
    return system.directory_name if system else None


def get_rom_device_path(system: RomSystem, roms_path: Optional[str] = None) -> str:
    """Get the device folder of a ROM system.

    Pattern: /mnt/SDCARD/Roms/{DisplayName} ({SystemCode})
    """
    return join_path(roms_path or DEVICE_PATHS["roms"], system.directory_name)


def get_rom_media_path(
    system: RomSystem,
    roms_path: Optional[str] = None,
    media_dir: str = DEFAULT_MEDIA_DIR,
) -> str:
    """Get the media folder of a ROM system.

    Pattern: /mnt/SDCARD/Roms/{DisplayName} ({SystemCode})/.media
    """
    return join_path(get_rom_device_path(system, roms_path), media_dir)


def is_valid_rom_extension(extension: str, system: RomSystem) -> bool:
    """Check if a file extension is valid for a given system.

    Args:
        extension: File extension with dot (e.g. ".nes")
        system: ROM system to check against
    """
    if system.is_custom:
        return True
    return extension.lower() in system.supported_formats
