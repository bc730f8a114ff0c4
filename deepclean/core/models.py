"""Declarative cleanup steps: reclaim targets, external tools, snapshots."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .constants import TOOL_TIMEOUT


class Mode(Enum):
    CLEAR_CONTENTS = "clear"
    REMOVE_ENTIRELY = "remove"


@dataclass(frozen=True)
class EntryFilter:
    """Selects entries anywhere below a target; everything else is kept."""

    pattern: str = "*"
    kind: str = "file"  # "file" or "dir"
    older_than_days: Optional[int] = None


@dataclass(frozen=True)
class ReclaimTarget:
    path: str
    label: str
    mode: Mode = Mode.CLEAR_CONTENTS
    requires_confirmation: bool = False
    prompt: Optional[str] = None
    threshold_bytes: Optional[int] = None
    sudo: bool = False
    match: Optional[EntryFilter] = None


@dataclass(frozen=True)
class ExternalTool:
    """A third-party command run for its own cleanup subcommand.

    ``binaries`` are tried in order and the first one on PATH is used. When
    ``probe`` is set the tool only counts as present if ``<binary> <probe>``
    exits 0 (e.g. a daemon that must be running). ``cache_query`` names a
    subcommand whose stdout is a cache directory removed after the tool ran.
    """

    key: str
    label: str
    binaries: Tuple[str, ...]
    args: Tuple[str, ...]
    probe: Tuple[str, ...] = ()
    sudo: bool = False
    timeout: int = TOOL_TIMEOUT
    quiet_when_absent: bool = True
    cache_query: Tuple[str, ...] = ()
    cache_prefixes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LocalSnapshots:
    label: str = "Time Machine local snapshots"
    volume: str = "/"
    prompt: str = "Delete all Time Machine local snapshots?"


@dataclass(frozen=True)
class SizeAdvisory:
    """Prints a hint when ``path`` is larger than ``threshold_bytes``.

    Only evaluated when ``when_absent`` (a tool key in the same section) was
    not available. Never deletes anything.
    """

    path: str
    label: str
    threshold_bytes: int
    hint: str
    when_absent: Optional[str] = None


Step = Union[ReclaimTarget, ExternalTool, LocalSnapshots, SizeAdvisory]


@dataclass(frozen=True)
class Section:
    key: str
    title: str
    steps: Tuple[Step, ...] = field(default_factory=tuple)

    def targets(self):
        return [s for s in self.steps if isinstance(s, ReclaimTarget)]
