"""Core constants, models, targets and config for mac-deepclean."""

from .constants import (
    HOME,
    KIB,
    MIB,
    GIB,
    DISK_ROOT,
    PREFLIGHT_THRESHOLD,
)
from .models import (
    Mode,
    EntryFilter,
    ReclaimTarget,
    ExternalTool,
    LocalSnapshots,
    SizeAdvisory,
    Section,
)
from .results import (
    FatalEnvironmentError,
    Status,
    SkipReason,
    FailureKind,
    SoftFailure,
    ProcessedResult,
    SectionReport,
    RunReport,
)
from .targets import SECTIONS, SECTION_KEYS, CONFIRMED_SECTIONS, PREFLIGHT_TARGETS, build_sections
from . import config

__all__ = [
    "HOME",
    "KIB",
    "MIB",
    "GIB",
    "DISK_ROOT",
    "PREFLIGHT_THRESHOLD",
    "Mode",
    "EntryFilter",
    "ReclaimTarget",
    "ExternalTool",
    "LocalSnapshots",
    "SizeAdvisory",
    "Section",
    "FatalEnvironmentError",
    "Status",
    "SkipReason",
    "FailureKind",
    "SoftFailure",
    "ProcessedResult",
    "SectionReport",
    "RunReport",
    "SECTIONS",
    "SECTION_KEYS",
    "CONFIRMED_SECTIONS",
    "PREFLIGHT_TARGETS",
    "build_sections",
    "config",
]
