"""Disk and path helpers for mac-deepclean."""
import logging
import os
import shutil
import stat
import time

from ..core.constants import KIB, MIB, GIB
from ..core.results import FailureKind, FatalEnvironmentError, SoftFailure

logger = logging.getLogger(__name__)


# size formatter
def format_bytes(num):
    """Render a byte count: 1.0GB, 10.0MB, 12KB, 512B.

    Values are truncated, never rounded up, so a count always renders in its
    own unit tier.
    """
    num = max(0, int(num))
    if num >= GIB:
        return f"{num * 10 // GIB / 10:.1f}GB"
    if num >= MIB:
        return f"{num * 10 // MIB / 10:.1f}MB"
    if num >= KIB:
        return f"{num // KIB}KB"
    return f"{num}B"


def _allocated(st):
    blocks = getattr(st, "st_blocks", None)
    if blocks is None:
        return st.st_size
    return blocks * 512


def measure_size(path, failures=None, label=None):
    """Return the on-disk size of ``path`` in bytes.

    Missing paths are 0. Unreadable parts count as 0 and are appended to
    ``failures`` as one MEASUREMENT_FAILURE instead of raising. Symlinks are
    not followed and hard-linked files are counted once.
    """
    errors = []

    def onerror(e):
        errors.append(e)

    total = 0
    seen = set()
    try:
        st = os.lstat(path)
    except FileNotFoundError:
        return 0
    except OSError as e:
        errors.append(e)
        st = None

    if st is not None:
        total += _allocated(st)
        if stat.S_ISDIR(st.st_mode):
            for root, dirs, files in os.walk(path, onerror=onerror, followlinks=False):
                for name in dirs + files:
                    fp = os.path.join(root, name)
                    try:
                        est = os.lstat(fp)
                    except OSError as e:
                        errors.append(e)
                        continue
                    if est.st_nlink > 1 and not stat.S_ISDIR(est.st_mode):
                        key = (est.st_dev, est.st_ino)
                        if key in seen:
                            continue
                        seen.add(key)
                    total += _allocated(est)

    if errors:
        for e in errors[:5]:
            logger.debug("size of %s: %s", path, e)
        if failures is not None:
            failures.append(
                SoftFailure(
                    FailureKind.MEASUREMENT_FAILURE,
                    label or path,
                    f"{len(errors)} entr{'y' if len(errors) == 1 else 'ies'} could not be measured",
                )
            )
    return total


def count_path(path):
    """Count top-level items (files + dirs) in path. Returns 0 if unreadable."""
    try:
        if not os.path.exists(path):
            return 0
        if os.path.isfile(path):
            return 1
        return len(os.listdir(path))
    except OSError:
        return 0


def is_older_than(st, days, now=None):
    now = time.time() if now is None else now
    return st.st_mtime < now - days * 86400


def free_space_bytes(root="/"):
    """Available bytes on the filesystem holding ``root``."""
    try:
        return shutil.disk_usage(root).free
    except OSError as e:
        raise FatalEnvironmentError(f"cannot read free space of {root}: {e}") from e


def disk_usage_line(root="/"):
    try:
        usage = shutil.disk_usage(root)
    except OSError as e:
        raise FatalEnvironmentError(f"cannot read disk usage of {root}: {e}") from e
    capacity = round(usage.used / usage.total * 100) if usage.total else 0
    return (
        f"Disk: {format_bytes(usage.total)} total, {format_bytes(usage.used)} used, "
        f"{format_bytes(usage.free)} free ({capacity}% capacity)"
    )
