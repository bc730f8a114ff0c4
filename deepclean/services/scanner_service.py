#!/usr/bin/env python3
"""Preflight sizing and section selection."""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..core.constants import PREFLIGHT_THRESHOLD
from ..core.targets import PREFLIGHT_TARGETS, SECTIONS
from ..utils.disk import measure_size
from . import snapshot_service


@dataclass
class PreflightReport:
    rows: List[Tuple[str, int]] = field(default_factory=list)
    total: int = 0
    snapshot_count: int = 0


def build_preflight_report(targets=PREFLIGHT_TARGETS, threshold=PREFLIGHT_THRESHOLD,
                           count_snapshots=True) -> PreflightReport:
    """Measure well-known locations; list and sum those above ``threshold``.

    Advisory only: it never decides what the run will process.
    """
    report = PreflightReport()
    for path, label in targets:
        size = measure_size(path)
        if size > threshold:
            report.rows.append((label, size))
            report.total += size
    if count_snapshots:
        report.snapshot_count = len(snapshot_service.list_snapshots())
    return report


def visible_sections(cfg: dict, only: Optional[Iterable[str]] = None,
                     skip: Optional[Iterable[str]] = None, sections=None):
    """Sections in run order after config exclusions and --only/--skip."""
    sections = SECTIONS if sections is None else sections
    excl = set(cfg.get("exclude_sections") or []) | set(skip or [])
    wanted = set(only) if only else None
    out = []
    for s in sections:
        if s.key in excl:
            continue
        if wanted is not None and s.key not in wanted:
            continue
        out.append(s)
    return out
