"""CLI interface for pynextui."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .cli_progress import run_transfer_with_progress
from .config import config
from .device import (
    AdbDevice,
    MountedDevice,
    RemoteFileSystem,
    get_storage_info,
    verify_installation,
)
from .exceptions import NextUIError, NoSystemDirectoriesError
from .output import OutputFormatter
from .roms import ROM_SYSTEMS, parse_rom_directory_name
from .sync import (
    ConflictResolution,
    PromptConflictResolver,
    StaticConflictResolver,
    SyncSession,
)

logger = logging.getLogger(__name__)


def get_device(ctx: Any) -> RemoteFileSystem:
    """Create the device selected by the global options.

    A mount point takes precedence over adb.
    """
    if ctx.obj.get("device") is not None:
        return ctx.obj["device"]

    mount: Optional[Path] = ctx.obj.get("mount")
    if mount is not None:
        device: RemoteFileSystem = MountedDevice(mount)
    else:
        device = AdbDevice(adb_path=ctx.obj.get("adb_path"), serial=ctx.obj.get("serial"))
    ctx.obj["device"] = device
    return device


@click.group()
@click.option(
    "--adb-path", envvar="NEXTUI_ADB_PATH", help="Path to the adb executable"
)
@click.option("--serial", "-s", envvar="NEXTUI_SERIAL", help="Device serial for adb")
@click.option(
    "--mount",
    "-m",
    envvar="NEXTUI_MOUNT",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Use an SD card mounted at this path instead of adb",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pynextui")
@click.pass_context
def main(
    ctx: Any,
    adb_path: Optional[str],
    serial: Optional[str],
    mount: Optional[Path],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """pynextui - Manage ROMs on NextUI handhelds."""
    ctx.ensure_object(dict)
    ctx.obj["adb_path"] = adb_path or config.adb_path
    ctx.obj["serial"] = serial or config.serial
    ctx.obj["mount"] = mount or config.mount_point
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pynextui").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--adb-path", help="Path to the adb executable to remember")
@click.option("--serial", "-s", help="Device serial to remember")
@click.option(
    "--mount",
    "-m",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="SD card mount point to remember",
)
@click.pass_context
def init(
    ctx: Any,
    adb_path: Optional[str],
    serial: Optional[str],
    mount: Optional[Path],
) -> None:
    """Save connection settings to ~/.config/pynextui/config.

    The connection is checked first; settings are saved even if the device
    is not reachable right now.
    """
    out: OutputFormatter = ctx.obj["out"]

    if not (adb_path or serial or mount):
        out.error("Nothing to save. Pass --adb-path, --serial or --mount.")
        ctx.exit(1)

    ctx.obj.update(
        adb_path=adb_path or ctx.obj.get("adb_path"),
        serial=serial or ctx.obj.get("serial"),
        mount=mount or ctx.obj.get("mount"),
    )
    try:
        result = verify_installation(get_device(ctx))
        if result.ok:
            out.success("✓ NextUI installation found")
        else:
            out.warning(f"Device check failed: {result.error}")
    except NextUIError as e:
        out.warning(f"Device check failed: {e}")

    try:
        if adb_path:
            config.save_value("NEXTUI_ADB_PATH", adb_path)
        if serial:
            config.save_value("NEXTUI_SERIAL", serial)
        if mount:
            config.save_value("NEXTUI_MOUNT", str(mount))
    except (NextUIError, OSError) as e:
        out.error(f"Failed to save configuration: {e}")
        ctx.exit(1)

    out.success(f"✓ Configuration saved to {config.get_config_path()}")


@main.command()
@click.pass_context
def systems(ctx: Any) -> None:
    """List the ROM systems known to NextUI."""
    out: OutputFormatter = ctx.obj["out"]

    if out.json_output:
        out.output_json(
            [
                {
                    "code": s.system_code,
                    "name": s.system_name,
                    "folder": s.directory_name,
                    "formats": list(s.supported_formats),
                }
                for s in ROM_SYSTEMS
            ]
        )
        return

    out.print_table(
        ["Code", "System", "Folder", "Formats"],
        [
            [
                s.system_code,
                s.system_name,
                s.directory_name,
                " ".join(s.supported_formats),
            ]
            for s in ROM_SYSTEMS
        ],
        title="ROM systems",
    )


@main.command()
@click.pass_context
def info(ctx: Any) -> None:
    """Check the NextUI installation and show SD card usage."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        device = get_device(ctx)
        result = verify_installation(device)
        storage = get_storage_info(device) if result.ok else None
    except NextUIError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        data: dict[str, Any] = {
            "ok": result.ok,
            "error": result.error,
            "version": result.version,
        }
        if storage is not None:
            data["storage"] = {
                "total_bytes": storage.total_bytes,
                "used_bytes": storage.used_bytes,
                "available_bytes": storage.available_bytes,
            }
        out.output_json(data)
        if not result.ok:
            ctx.exit(1)
        return

    if not result.ok:
        out.error(result.error or "NextUI installation not found")
        ctx.exit(1)

    out.success("✓ NextUI installation found")
    if result.version:
        out.print(f"Version: {result.version}")
    if storage is not None:
        out.print(
            f"Storage: {out.format_size(storage.used_bytes)} used of "
            f"{out.format_size(storage.total_bytes)} "
            f"({out.format_size(storage.available_bytes)} free)"
        )
    else:
        out.info("Storage information unavailable")


def _matches_filter(dir_name: str, filters: tuple[str, ...]) -> bool:
    """True if a system folder matches a --system value (folder name or code)."""
    parsed = parse_rom_directory_name(dir_name)
    for value in filters:
        if value == dir_name:
            return True
        if parsed is not None and value.upper() == parsed.system_code.upper():
            return True
    return False


def _display_plan(out: OutputFormatter, session: SyncSession) -> None:
    rows = []
    for system in session.systems:
        rows.append(
            [
                system.dir_name,
                str(session.system_new_count(system)),
                str(session.system_existing_count(system)),
                str(session.system_selected_count(system)),
            ]
        )
    out.print_table(["System", "New", "On device", "Selected"], rows, title="Sync plan")
    out.info(
        f"{session.new_count} new, {session.existing_count} already on device, "
        f"{session.selected_count} selected"
    )


def _display_summary(out: OutputFormatter, session: SyncSession) -> None:
    counters = session.counters
    out.print("")
    out.info("Transfer summary:")
    out.info(
        f"  Transferred: {counters.transferred} "
        f"({out.format_size(counters.bytes_transferred)})"
    )
    out.info(f"  Skipped: {counters.skipped}")
    if counters.failed:
        out.warning(f"  Failed: {counters.failed}")
    else:
        out.info(f"  Failed: {counters.failed}")


@main.command()
@click.argument(
    "local_root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--on-conflict",
    type=click.Choice(["ask", "overwrite", "skip"]),
    default="ask",
    show_default=True,
    help="How to handle files that already exist on the device",
)
@click.option(
    "--include-existing",
    is_flag=True,
    help="Also select files that already exist on the device",
)
@click.option(
    "--system",
    "-S",
    "system_filter",
    multiple=True,
    help="Only sync this system (folder name or code); repeatable",
)
@click.option("--dry-run", is_flag=True, help="Show the plan without transferring")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def sync(
    ctx: Any,
    local_root: Path,
    on_conflict: str,
    include_existing: bool,
    system_filter: tuple[str, ...],
    dry_run: bool,
    yes: bool,
) -> None:
    """Copy ROMs from LOCAL_ROOT to the device.

    LOCAL_ROOT must contain system folders named like the device's, e.g.
    "Game Boy (GB)", optionally with a .media subfolder. Files missing on
    the device are selected by default; files already there are only sent
    with --include-existing and are then resolved per --on-conflict.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        device = get_device(ctx)
        session = SyncSession(
            device,
            roms_path=config.roms_path,
            media_dir_name=config.media_dir,
            on_refresh=lambda: logger.debug("Device ROM folders changed"),
        )
        session.scan(local_root)
    except NoSystemDirectoriesError as e:
        out.warning(str(e))
        return
    except NextUIError as e:
        out.error(str(e))
        ctx.exit(1)

    for system in session.systems:
        if system_filter and not _matches_filter(system.dir_name, system_filter):
            session.deselect_system(system)
        elif include_existing:
            session.select_all_in_system(system)

    if dry_run:
        if out.json_output:
            out.output_json(session.to_dict())
        else:
            _display_plan(out, session)
            out.info("Dry run: no files were transferred")
        session.exit()
        return

    if not out.json_output:
        _display_plan(out, session)

    if session.selected_count == 0:
        out.warning("Nothing selected to transfer")
        session.exit()
        return

    if not yes and not out.json_output:
        if not click.confirm(f"Transfer {session.selected_count} file(s)?", default=True):
            out.warning("Sync cancelled.")
            session.exit()
            return

    if on_conflict == "overwrite":
        resolver = StaticConflictResolver(ConflictResolution.OVERWRITE_ALL)
    elif on_conflict == "skip":
        resolver = StaticConflictResolver(ConflictResolution.SKIP_ALL)
    elif out.json_output:
        if any(not f.is_new for _, f in session.selected_items()):
            out.error("--on-conflict ask cannot be used with --json")
            ctx.exit(1)
        # No selected file exists on the device, so nothing will be asked
        resolver = StaticConflictResolver(ConflictResolution.SKIP)
    else:
        resolver = PromptConflictResolver(out)

    if out.quiet or out.json_output:
        session.start_transfer(resolver)
    else:
        run_transfer_with_progress(session, resolver)

    if out.json_output:
        out.output_json(session.to_dict())
    else:
        _display_summary(out, session)
    session.exit()

    if session.counters.failed:
        ctx.exit(1)


if __name__ == "__main__":
    main()
