"""Tests for the batch transfer executor and conflict policies."""

from unittest.mock import Mock

import pytest

from pynextui.device.base import DirectoryEntry, RemoteFileSystem
from pynextui.exceptions import DeviceNotFoundError
from pynextui.sync import (
    BatchTransferExecutor,
    ConflictPolicy,
    ConflictResolution,
    StaticConflictResolver,
    SyncableFile,
    SyncableSystem,
    SyncSession,
    TransferOutcome,
)

GB = "Game Boy (GB)"


class FakeDevice:
    """In-memory device holding a fixed listing and recording writes."""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.writes = []
        self.directories = []

    def list_directory(self, path):
        prefix = path.rstrip("/") + "/"
        entries = [
            DirectoryEntry(name=p[len(prefix):], size=len(data), is_file=True, is_directory=False)
            for p, data in self.files.items()
            if p.startswith(prefix) and "/" not in p[len(prefix):]
        ]
        if not entries:
            raise DeviceNotFoundError(f"Directory not found: {path}", path=path)
        return entries

    def exists(self, path):
        return path in self.files

    def ensure_directory(self, path):
        self.directories.append(path)

    def read_file(self, path):
        return self.files[path]

    def write_file(self, path, data, mode=0o644):
        self.writes.append(path)
        self.files[path] = data

    def shell(self, command):
        return ""


@pytest.fixture
def local_root(tmp_path):
    """Local tree with three GB ROMs."""
    root = tmp_path / "local"
    (root / GB).mkdir(parents=True)
    for name in ["a.gb", "b.gb", "c.gb"]:
        (root / GB / name).write_bytes(name.encode())
    return root


def _existing_device():
    """Device that already has all three ROMs."""
    base = f"/mnt/SDCARD/Roms/{GB}"
    return FakeDevice({f"{base}/{n}": b"old" for n in ["a.gb", "b.gb", "c.gb"]})


def _review_all(device, local_root) -> SyncSession:
    session = SyncSession(device)
    session.scan(local_root)
    session.select_all_in_system(GB)
    return session


class TestConflictPolicies:
    """Test how conflict answers drive the session policy."""

    def test_fake_device_satisfies_protocol(self):
        """Test that the in-memory device matches the protocol."""
        assert isinstance(FakeDevice(), RemoteFileSystem)

    def test_skip_all_stops_asking(self, local_root):
        """Test that skip-all applies to every later conflict."""
        device = _existing_device()
        session = _review_all(device, local_root)
        resolver = StaticConflictResolver(ConflictResolution.SKIP_ALL)

        session.start_transfer(resolver)

        assert len(resolver.requests) == 1
        assert session.conflict_policy == ConflictPolicy.SKIP_ALL
        assert session.counters.skipped == 3
        assert device.writes == []

    def test_overwrite_all_stops_asking(self, local_root):
        """Test that overwrite-all applies to every later conflict."""
        device = _existing_device()
        session = _review_all(device, local_root)
        resolver = StaticConflictResolver(ConflictResolution.OVERWRITE_ALL)

        session.start_transfer(resolver)

        assert len(resolver.requests) == 1
        assert session.conflict_policy == ConflictPolicy.OVERWRITE_ALL
        assert session.counters.transferred == 3
        assert len(device.writes) == 3

    def test_single_answers_ask_every_time(self, local_root):
        """Test that overwrite/skip keep the policy at ASK."""
        session = _review_all(_existing_device(), local_root)
        resolver = StaticConflictResolver(ConflictResolution.SKIP)

        session.start_transfer(resolver)

        assert len(resolver.requests) == 3
        assert session.conflict_policy == ConflictPolicy.ASK

    def test_policy_reset_for_each_transfer(self, local_root):
        """Test that a new session starts with the ASK policy."""
        first = _review_all(_existing_device(), local_root)
        first.start_transfer(StaticConflictResolver(ConflictResolution.SKIP_ALL))

        second = _review_all(_existing_device(), local_root)
        assert second.conflict_policy == ConflictPolicy.ASK

    def test_failing_resolver_skips_file(self, local_root):
        """Test that a resolver error is treated as skip."""
        device = _existing_device()
        session = _review_all(device, local_root)
        resolver = Mock()
        resolver.resolve.side_effect = RuntimeError("prompt closed")

        session.start_transfer(resolver)

        assert session.counters.skipped == 3
        assert session.counters.failed == 0
        assert device.writes == []


class TestBatchTransferExecutor:
    """Test transfer details of the executor."""

    def test_destination_dir(self):
        """Test root and media destinations."""
        executor = BatchTransferExecutor(FakeDevice())
        system = SyncableSystem(dir_name=GB)
        rom = SyncableFile(name="a.gb", is_media=False, local_size=1, source=Mock())
        art = SyncableFile(name="a.png", is_media=True, local_size=1, source=Mock())

        assert executor.destination_dir(system, rom) == f"/mnt/SDCARD/Roms/{GB}"
        assert executor.destination_dir(system, art) == f"/mnt/SDCARD/Roms/{GB}/.media"

    def test_custom_roms_path_and_media_dir(self):
        """Test that configured paths are honored."""
        executor = BatchTransferExecutor(
            FakeDevice(), roms_path="/sd/Roms", media_dir_name="Imgs"
        )
        system = SyncableSystem(dir_name=GB)
        art = SyncableFile(name="a.png", is_media=True, local_size=1, source=Mock())

        assert executor.destination_dir(system, art) == f"/sd/Roms/{GB}/Imgs"

    def test_unreadable_local_file_fails(self, local_root):
        """Test that a local read error counts as failed."""
        device = FakeDevice()
        session = SyncSession(device)
        session.scan(local_root)
        (local_root / GB / "b.gb").unlink()

        session.start_transfer(StaticConflictResolver(ConflictResolution.SKIP))

        assert session.counters.failed == 1
        assert session.counters.transferred == 2
        assert f"/mnt/SDCARD/Roms/{GB}/b.gb" not in device.writes

    def test_outcomes_in_selection_order(self, local_root):
        """Test that files are processed in scan order."""
        device = FakeDevice()
        session = SyncSession(device)
        session.scan(local_root)
        outcomes = []
        session.subscribe(
            lambda info: outcomes.append((info.file_name, info.outcome))
            if info.outcome
            else None
        )

        session.start_transfer(StaticConflictResolver(ConflictResolution.SKIP))

        assert outcomes == [
            ("a.gb", TransferOutcome.TRANSFERRED.value),
            ("b.gb", TransferOutcome.TRANSFERRED.value),
            ("c.gb", TransferOutcome.TRANSFERRED.value),
        ]
