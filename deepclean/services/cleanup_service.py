#!/usr/bin/env python3
"""Cleanup driver: run sections step by step and collect a RunReport."""
import logging
import os

from ..core.constants import DISK_ROOT
from ..core.models import ExternalTool, LocalSnapshots, Mode, ReclaimTarget, SizeAdvisory
from ..core.results import (
    FailureKind,
    ProcessedResult,
    RunReport,
    SectionReport,
    SkipReason,
    SoftFailure,
    Status,
)
from ..utils import output
from ..utils.disk import format_bytes, free_space_bytes, measure_size
from ..utils.prompt import assume_yes
from . import reclaim_service, snapshot_service
from . import tools_service as tools

logger = logging.getLogger(__name__)

STEP_TYPES = (ReclaimTarget, ExternalTool, LocalSnapshots, SizeAdvisory)


def _failed(label, kind, detail):
    return ProcessedResult(label, Status.SKIPPED, failures=[SoftFailure(kind, label, detail)])


def print_result(result: ProcessedResult, quiet=False):
    """One progress line per step, plus one warning per soft failure."""
    label = result.label
    if result.status is Status.CLEANED:
        if result.freed:
            output.log_info(f"{label} — freed {format_bytes(result.freed)}")
        elif result.detail:
            output.log_info(f"{label} — {result.detail}")
        else:
            output.log_info(label)
    elif result.status is Status.ALREADY_CLEAN:
        output.log_info(f"{label} — {result.detail or 'already clean'}")
    elif result.reason is SkipReason.NOT_FOUND:
        output.log_skip(label)
    elif result.reason is SkipReason.BELOW_THRESHOLD:
        output.log_dim(f"- {label} (below threshold: {result.detail})")
    elif result.reason is SkipReason.DECLINED:
        output.log_warn(f"{label} kept" + (f" ({result.detail})" if result.detail else ""))
    elif result.reason is SkipReason.TOOL_ABSENT:
        if not quiet:
            output.log_skip(label, result.detail or "not installed")
    elif result.reason is SkipReason.DRY_RUN:
        size = f" {format_bytes(result.size_before)}" if result.size_before else ""
        output.log_dim(f"dry-run: {label} — would free{size} ({result.detail})")
    for f in result.failures:
        output.log_warn(f"{f.label}: {f.detail}")


def _run_tool(tool: ExternalTool, confirm, dry_run, use_sudo):
    results = []
    binary = tools.detect(tool)
    if not binary:
        detail = "not running" if tool.probe else "not installed"
        result = ProcessedResult.skipped(tool.label, SkipReason.TOOL_ABSENT, detail=detail)
        print_result(result, quiet=tool.quiet_when_absent)
        return [result], False
    if dry_run:
        cmd = " ".join((os.path.basename(binary),) + tool.args)
        result = ProcessedResult.skipped(tool.label, SkipReason.DRY_RUN, detail=f"would run {cmd}")
    else:
        outcome = tools.invoke(tool, binary, use_sudo)
        if outcome.ok:
            result = ProcessedResult(tool.label, Status.CLEANED)
        else:
            result = _failed(tool.label, FailureKind.EXTERNAL_TOOL_FAILURE,
                             f"{tool.key} failed: {outcome.detail}")
    print_result(result)
    results.append(result)

    cache_dir = tools.resolve_cache_dir(tool, binary)
    if cache_dir:
        cache = ReclaimTarget(cache_dir, f"{tool.key} download cache", Mode.REMOVE_ENTIRELY)
        extra = reclaim_service.process(cache, confirm, dry_run=dry_run, use_sudo=use_sudo)
        print_result(extra)
        results.append(extra)
    return results, True


def _advise(step: SizeAdvisory):
    size = measure_size(step.path)
    if size > step.threshold_bytes:
        output.log_warn(f"{step.label} dir is {format_bytes(size)} at {step.path}")
        output.log_dim(step.hint)


def run_section(section, confirm=assume_yes, dry_run=False, use_sudo=True, exclude_targets=()):
    """Process every step of ``section`` in order.

    A failure in one step is recorded on its result and never stops the
    following steps.
    """
    report = SectionReport(section.key, section.title)
    absent = set()
    excluded = set(exclude_targets or ())
    for step in section.steps:
        if not isinstance(step, STEP_TYPES):
            raise TypeError(f"unknown step type: {type(step).__name__}")
        label = step.label
        if label in excluded:
            output.log_dim(f"- {label} (excluded by config)")
            continue
        try:
            if isinstance(step, ReclaimTarget):
                result = reclaim_service.process(step, confirm, dry_run=dry_run, use_sudo=use_sudo)
                print_result(result)
                report.results.append(result)
            elif isinstance(step, ExternalTool):
                results, present = _run_tool(step, confirm, dry_run, use_sudo)
                if not present:
                    absent.add(step.key)
                report.results.extend(results)
            elif isinstance(step, LocalSnapshots):
                result = snapshot_service.process_snapshots(step, confirm, dry_run=dry_run, use_sudo=use_sudo)
                print_result(result)
                report.results.append(result)
            elif step.when_absent is None or step.when_absent in absent:
                _advise(step)
        except Exception as e:
            logger.debug("%s failed", label, exc_info=True)
            result = _failed(label, FailureKind.TARGET_ERROR, str(e) or type(e).__name__)
            print_result(result)
            report.results.append(result)
    return report


def run_all(sections, confirm=assume_yes, dry_run=False, use_sudo=True,
            exclude_targets=(), disk_root=DISK_ROOT) -> RunReport:
    """Run ``sections`` in order between two free-space readings of ``disk_root``.

    Raises FatalEnvironmentError when free space cannot be read.
    """
    report = RunReport(dry_run=dry_run)
    report.free_before = free_space_bytes(disk_root)
    for section in sections:
        output.log_header(section.title)
        report.sections.append(
            run_section(section, confirm, dry_run=dry_run, use_sudo=use_sudo,
                        exclude_targets=exclude_targets)
        )
    report.free_after = free_space_bytes(disk_root)
    return report
