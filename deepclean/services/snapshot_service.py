#!/usr/bin/env python3
"""Time Machine local snapshots: list, confirm once, delete one by one."""
import logging
import subprocess

from ..core.constants import SNAPSHOT_TIMEOUT
from ..core.models import LocalSnapshots
from ..core.results import FailureKind, ProcessedResult, SkipReason, SoftFailure, Status
from ..utils.prompt import assume_yes
from . import tools_service as tools

logger = logging.getLogger(__name__)


def _tmutil(*args):
    try:
        return subprocess.check_output(
            ["tmutil", *args], text=True, errors="replace", timeout=SNAPSHOT_TIMEOUT,
            stderr=subprocess.DEVNULL,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
        logger.debug("tmutil %s: %s", " ".join(args), e)
        return ""


def list_snapshots(volume="/"):
    """Snapshot names such as ``com.apple.TimeMachine.2024-05-01-101010.local``."""
    out = _tmutil("listlocalsnapshots", volume)
    return [ln.strip() for ln in out.splitlines() if "com.apple" in ln]


def list_snapshot_dates(volume="/"):
    """Identifiers accepted by ``tmutil deletelocalsnapshots``."""
    out = _tmutil("listlocalsnapshotdates", volume)
    return [ln.strip() for ln in out.splitlines() if ln.strip() and "Snapshot" not in ln]


def delete_snapshots(dates, use_sudo=True):
    """Delete each snapshot date; returns ``[(date, error), ...]`` for the failures."""
    failed = []
    prefix = tools.sudo_prefix(True, use_sudo)
    for date in dates:
        ok, err = tools._run_cmd(
            prefix + ["tmutil", "deletelocalsnapshots", date], timeout=SNAPSHOT_TIMEOUT
        )
        if not ok:
            logger.debug("deletelocalsnapshots %s: %s", date, err)
            failed.append((date, err))
    return failed


def process_snapshots(step: LocalSnapshots, confirm=assume_yes, dry_run=False, use_sudo=True):
    snaps = list_snapshots(step.volume)
    if not snaps:
        return ProcessedResult(step.label, Status.ALREADY_CLEAN, detail="No local snapshots found")
    count = len(snaps)
    if not confirm(f"{step.prompt} [{count} snapshot(s)]"):
        return ProcessedResult.skipped(step.label, SkipReason.DECLINED, detail=f"{count} snapshot(s) kept")
    if dry_run:
        return ProcessedResult.skipped(
            step.label, SkipReason.DRY_RUN, detail=f"would delete {count} snapshot(s)"
        )
    dates = list_snapshot_dates(step.volume)
    if not dates:
        failure = SoftFailure(
            FailureKind.EXTERNAL_TOOL_FAILURE, step.label, "tmutil listed no snapshot dates to delete"
        )
        return ProcessedResult(
            step.label, Status.SKIPPED, failures=[failure], detail=f"{count} snapshot(s) kept"
        )
    failed = delete_snapshots(dates, use_sudo)
    failures = [
        SoftFailure(FailureKind.PARTIAL_DELETE_FAILURE, step.label, f"{date}: {err}")
        for date, err in failed
    ]
    deleted = len(dates) - len(failed)
    # Space held by snapshots only shows up in the free-space delta
    return ProcessedResult(
        step.label,
        Status.CLEANED if deleted else Status.ALREADY_CLEAN,
        failures=failures,
        detail=f"{deleted} of {len(dates)} snapshot(s) deleted",
    )
