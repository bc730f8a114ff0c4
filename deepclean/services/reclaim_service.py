#!/usr/bin/env python3
"""Measure, confirm, delete and account for a single reclaim target."""
import dataclasses
import fnmatch
import logging
import os
import shutil
import time

from ..core.models import EntryFilter, Mode, ReclaimTarget
from ..core.results import FailureKind, ProcessedResult, SkipReason, SoftFailure
from ..utils.disk import count_path, format_bytes, is_older_than, measure_size
from ..utils.prompt import assume_yes
from . import tools_service as tools

logger = logging.getLogger(__name__)

SUDO_BATCH = 200


def _remove(path):
    """Delete one file, symlink or directory tree, ignoring errors."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path, ignore_errors=True)
    else:
        try:
            os.remove(path)
        except OSError as e:
            logger.debug("rm %s: %s", path, e)


def _survivors(paths):
    return [p for p in paths if os.path.lexists(p)]


def delete_contents(path):
    """Remove every direct child of ``path``; the directory itself stays.

    Returns the children that could not be (fully) removed. Raises OSError
    when the directory itself cannot be listed.
    """
    children = [os.path.join(path, n) for n in os.listdir(path)]
    for p in children:
        _remove(p)
    return _survivors(children)


def remove_path(path):
    """Remove ``path`` itself. Returns ``[path]`` if anything is left behind."""
    _remove(path)
    return _survivors([path])


def matching_entries(path, filt: EntryFilter, now=None):
    """Yield entries below ``path`` selected by ``filt``; matched dirs are not descended."""
    now = time.time() if now is None else now

    def selected(full, name):
        if not fnmatch.fnmatch(name, filt.pattern):
            return False
        if filt.older_than_days is None:
            return True
        try:
            st = os.lstat(full)
        except OSError:
            return False
        return is_older_than(st, filt.older_than_days, now)

    for root, dirs, files in os.walk(path, followlinks=False):
        if filt.kind == "dir":
            for name in list(dirs):
                full = os.path.join(root, name)
                if selected(full, name):
                    dirs.remove(name)
                    yield full
        else:
            for name in files:
                full = os.path.join(root, name)
                if selected(full, name):
                    yield full


def delete_matching(path, filt: EntryFilter, now=None):
    """Remove only entries selected by ``filt``. Returns the ones left behind."""
    matched = list(matching_entries(path, filt, now))
    for p in matched:
        _remove(p)
    return _survivors(matched)


def _sudo_remove(paths):
    """Retry stubborn entries with ``sudo rm -rf``; returns what still exists."""
    for i in range(0, len(paths), SUDO_BATCH):
        batch = paths[i:i + SUDO_BATCH]
        ok, err = tools._run_cmd(["sudo", "rm", "-rf", "--", *batch], timeout=600)
        if not ok:
            logger.debug("sudo rm failed: %s", err)
    return _survivors(paths)


def _delete(target: ReclaimTarget):
    if target.match is not None:
        return delete_matching(target.path, target.match)
    if target.mode is Mode.REMOVE_ENTIRELY:
        return remove_path(target.path)
    return delete_contents(target.path)


def _would_free(target: ReclaimTarget, size_before):
    if target.match is None:
        n = count_path(target.path) if target.mode is Mode.CLEAR_CONTENTS else 1
        return size_before, f"{n} items"
    matched = list(matching_entries(target.path, target.match))
    return sum(measure_size(p) for p in matched), f"{len(matched)} matching"


def process(target: ReclaimTarget, confirm=assume_yes, dry_run=False, use_sudo=True):
    """Reclaim one target and report what was freed.

    Absent paths, targets under their threshold and declined confirmations
    are skips with no side effects. Deletion is best-effort: entries that
    cannot be removed become a PARTIAL_DELETE_FAILURE and ``freed`` reflects
    whatever is physically gone afterwards.
    """
    label = target.label
    path = target.path
    if not os.path.lexists(path):
        return ProcessedResult.skipped(label, SkipReason.NOT_FOUND)
    # A linked top-level directory is cleared and measured at its real location
    if os.path.islink(path) and os.path.isdir(path) and (
        target.mode is Mode.CLEAR_CONTENTS or target.match is not None
    ):
        path = os.path.realpath(path)
        target = dataclasses.replace(target, path=path)
    if target.mode is Mode.CLEAR_CONTENTS and not os.path.isdir(path):
        return ProcessedResult.skipped(label, SkipReason.NOT_FOUND, detail="not a directory")

    failures = []
    size_before = measure_size(path, failures, label)

    if target.threshold_bytes is not None and size_before < target.threshold_bytes:
        return ProcessedResult.skipped(
            label, SkipReason.BELOW_THRESHOLD, size_before, failures,
            detail=f"{format_bytes(size_before)} < {format_bytes(target.threshold_bytes)}",
        )

    if target.requires_confirmation:
        question = f"{target.prompt or f'Delete {label}?'} [{label}: {format_bytes(size_before)}]"
        if not confirm(question):
            return ProcessedResult.skipped(label, SkipReason.DECLINED, size_before, failures)

    if dry_run:
        would, detail = _would_free(target, size_before)
        return ProcessedResult.skipped(label, SkipReason.DRY_RUN, would, failures, detail=detail)

    try:
        left = _delete(target)
    except OSError as e:
        logger.debug("%s: %s", label, e)
        failures.append(SoftFailure(FailureKind.PARTIAL_DELETE_FAILURE, label, str(e)))
        left = []
    if left and target.sudo and tools.sudo_prefix(True, use_sudo):
        logger.debug("%s: retrying %d entries with sudo", label, len(left))
        left = _sudo_remove(left)
    if left:
        failures.append(
            SoftFailure(
                FailureKind.PARTIAL_DELETE_FAILURE,
                label,
                f"{len(left)} entr{'y' if len(left) == 1 else 'ies'} could not be removed",
            )
        )

    if target.mode is Mode.REMOVE_ENTIRELY and target.match is None and not os.path.lexists(path):
        size_after = 0
    else:
        size_after = measure_size(path)
    return ProcessedResult.from_sizes(label, size_before, size_after, failures)
