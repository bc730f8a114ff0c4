"""Outcomes of processing targets, sections and whole runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FatalEnvironmentError(RuntimeError):
    """The run cannot proceed at all (e.g. free space of / is unreadable)."""


class Status(Enum):
    CLEANED = "cleaned"
    ALREADY_CLEAN = "already_clean"
    SKIPPED = "skipped"


class SkipReason(Enum):
    NOT_FOUND = "not_found"
    BELOW_THRESHOLD = "below_threshold"
    DECLINED = "declined"
    TOOL_ABSENT = "tool_absent"
    DRY_RUN = "dry_run"


class FailureKind(Enum):
    PARTIAL_DELETE_FAILURE = "partial_delete_failure"
    MEASUREMENT_FAILURE = "measurement_failure"
    EXTERNAL_TOOL_FAILURE = "external_tool_failure"
    TARGET_ERROR = "target_error"


@dataclass
class SoftFailure:
    kind: FailureKind
    label: str
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "label": self.label, "detail": self.detail}


@dataclass
class ProcessedResult:
    label: str
    status: Status
    freed: int = 0
    reason: Optional[SkipReason] = None
    size_before: int = 0
    failures: List[SoftFailure] = field(default_factory=list)
    detail: str = ""

    @classmethod
    def skipped(cls, label, reason, size_before=0, failures=None, detail=""):
        return cls(
            label=label,
            status=Status.SKIPPED,
            reason=reason,
            size_before=size_before,
            failures=list(failures or []),
            detail=detail,
        )

    @classmethod
    def from_sizes(cls, label, size_before, size_after, failures=None, detail=""):
        """Cleaned when anything was freed, AlreadyClean otherwise."""
        freed = max(0, size_before - size_after)
        return cls(
            label=label,
            status=Status.CLEANED if freed > 0 else Status.ALREADY_CLEAN,
            freed=freed,
            size_before=size_before,
            failures=list(failures or []),
            detail=detail,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "status": self.status.value,
            "reason": self.reason.value if self.reason else None,
            "freed": self.freed,
            "size_before": self.size_before,
            "detail": self.detail,
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class SectionReport:
    key: str
    title: str
    results: List[ProcessedResult] = field(default_factory=list)

    @property
    def freed(self) -> int:
        return sum(r.freed for r in self.results)

    @property
    def failures(self) -> List[SoftFailure]:
        return [f for r in self.results for f in r.failures]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "freed": self.freed,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class RunReport:
    """Aggregate of one invocation.

    ``estimated_total_freed`` sums independent per-target measurements while
    ``actual_freed_bytes`` comes from the free-space counter. The two can
    disagree (compression, hard links, snapshots pinning blocks); both are
    reported as-is.
    """

    sections: List[SectionReport] = field(default_factory=list)
    free_before: int = 0
    free_after: int = 0
    dry_run: bool = False

    @property
    def per_target_freed(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for section in self.sections:
            for r in section.results:
                out[r.label] = out.get(r.label, 0) + r.freed
        return out

    @property
    def estimated_total_freed(self) -> int:
        return sum(s.freed for s in self.sections)

    @property
    def would_free(self) -> int:
        return sum(
            r.size_before
            for s in self.sections
            for r in s.results
            if r.reason is SkipReason.DRY_RUN
        )

    @property
    def actual_freed_bytes(self) -> int:
        return max(0, self.free_after - self.free_before)

    @property
    def failures(self) -> List[SoftFailure]:
        return [f for s in self.sections for f in s.failures]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "estimated_total_freed": self.estimated_total_freed,
            "actual_freed_bytes": self.actual_freed_bytes,
            "free_before": self.free_before,
            "free_after": self.free_after,
            "would_free": self.would_free,
            "per_target_freed": self.per_target_freed,
            "sections": [s.to_dict() for s in self.sections],
            "failures": [f.to_dict() for f in self.failures],
        }
