"""Conflict resolution for files that already exist on the device."""

from typing import Optional, Protocol

import click

from ..output import OutputFormatter
from ..utils import format_size
from .models import ConflictRequest, ConflictResolution


class ConflictResolver(Protocol):
    """Answers conflict questions during a transfer.

    The transfer loop waits for each answer, so at most one request is
    outstanding at any time.
    """

    def resolve(self, request: ConflictRequest) -> ConflictResolution:
        ...


class _SingleRequestGuard:
    """Rejects a second request while one is still being answered."""

    def __init__(self) -> None:
        self._pending: Optional[ConflictRequest] = None

    def begin(self, request: ConflictRequest) -> None:
        if self._pending is not None:
            raise RuntimeError(
                f"Conflict for {self._pending.file_name} is still open; "
                f"cannot ask about {request.file_name}"
            )
        self._pending = request

    def end(self) -> None:
        self._pending = None

    @property
    def pending(self) -> Optional[ConflictRequest]:
        return self._pending


class StaticConflictResolver:
    """Answers every conflict with the same resolution."""

    def __init__(self, resolution: ConflictResolution):
        self.resolution = resolution
        self.requests: list[ConflictRequest] = []

    def resolve(self, request: ConflictRequest) -> ConflictResolution:
        self.requests.append(request)
        return self.resolution


class PromptConflictResolver:
    """Asks the user on the terminal how to handle each conflict."""

    CHOICES = {
        "o": ConflictResolution.OVERWRITE,
        "s": ConflictResolution.SKIP,
        "O": ConflictResolution.OVERWRITE_ALL,
        "S": ConflictResolution.SKIP_ALL,
    }

    def __init__(self, out: OutputFormatter):
        """Initialize the prompt resolver.

        Args:
            out: Output formatter used to describe the conflict
        """
        self.out = out
        self._guard = _SingleRequestGuard()

    def resolve(self, request: ConflictRequest) -> ConflictResolution:
        self._guard.begin(request)
        try:
            kind = "Media file" if request.is_media else "File"
            self.out.warning(
                f"{kind} exists on device: '{request.system_dir}/{request.file_name}' "
                f"(local {format_size(request.local_size)}, "
                f"device {format_size(request.device_size)})"
            )
            try:
                answer = click.prompt(
                    "Action [o]verwrite, [s]kip, [O]verwrite all, [S]kip all",
                    type=click.Choice(list(self.CHOICES)),
                    show_choices=False,
                )
            except click.Abort:
                # Ctrl+C / EOF at the prompt: stop overwriting, keep the batch going
                self.out.warning("Prompt aborted; skipping all remaining conflicts")
                return ConflictResolution.SKIP_ALL
            return self.CHOICES[answer]
        finally:
            self._guard.end()
