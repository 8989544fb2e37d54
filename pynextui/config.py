"""Configuration management for pynextui.

Values are resolved from environment variables first, then from the
config file at ``~/.config/pynextui/config`` (``KEY=value`` lines), then
from built-in defaults.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import NextUIConfigError
from .utils import DEFAULT_MEDIA_DIR, DEVICE_PATHS

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    "NEXTUI_ADB_PATH",
    "NEXTUI_SERIAL",
    "NEXTUI_MOUNT",
    "NEXTUI_ROMS_PATH",
    "NEXTUI_MEDIA_DIR",
)


class Config:
    """Configuration for the device connection and sync layout."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file. Defaults to
                ~/.config/pynextui/
        """
        if config_dir is None:
            config_dir = Path.home() / ".config" / "pynextui"
        self.config_dir = config_dir
        self.config_file = config_dir / "config"
        self._file_values: dict[str, str] = {}
        self._load_config_file()

    def _load_config_file(self) -> None:
        """Load KEY=value pairs from the config file if it exists."""
        if not self.config_file.exists():
            return

        try:
            with open(self.config_file, encoding="utf-8") as f:
                for line_no, line in enumerate(f, 1):
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    if "=" not in line:
                        logger.warning(
                            f"Ignoring malformed line {line_no} in {self.config_file}"
                        )
                        continue
                    key, value = line.split("=", 1)
                    self._file_values[key.strip()] = value.strip()
        except OSError as e:
            logger.warning(f"Failed to read config file: {e}")

    def _get(self, key: str) -> Optional[str]:
        value = os.environ.get(key)
        if value:
            return value
        return self._file_values.get(key) or None

    @property
    def adb_path(self) -> Optional[str]:
        """Explicit path to the adb executable, if configured."""
        return self._get("NEXTUI_ADB_PATH")

    @property
    def serial(self) -> Optional[str]:
        """Serial of the device to talk to when several are attached."""
        return self._get("NEXTUI_SERIAL")

    @property
    def mount_point(self) -> Optional[Path]:
        """Local mount point of the device's SD card, if used instead of adb."""
        value = self._get("NEXTUI_MOUNT")
        return Path(value).expanduser() if value else None

    @property
    def roms_path(self) -> str:
        """Device directory holding the system folders."""
        value = self._get("NEXTUI_ROMS_PATH") or DEVICE_PATHS["roms"]
        if not value.startswith("/"):
            raise NextUIConfigError(
                f"NEXTUI_ROMS_PATH must be an absolute device path, got {value!r}"
            )
        return value.rstrip("/") or "/"

    @property
    def media_dir(self) -> str:
        """Name of the per-system media subfolder."""
        value = self._get("NEXTUI_MEDIA_DIR") or DEFAULT_MEDIA_DIR
        if "/" in value:
            raise NextUIConfigError(
                f"NEXTUI_MEDIA_DIR must be a single folder name, got {value!r}"
            )
        return value

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_file

    def save_value(self, key: str, value: str) -> None:
        """Persist a configuration value to the config file.

        Args:
            key: One of CONFIG_KEYS
            value: Value to store
        """
        if key not in CONFIG_KEYS:
            raise NextUIConfigError(f"Unknown configuration key: {key}")

        self._file_values[key] = value
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            for k in CONFIG_KEYS:
                if k in self._file_values:
                    f.write(f"{k}={self._file_values[k]}\n")
        logger.debug(f"Saved {key} to {self.config_file}")


config = Config()
