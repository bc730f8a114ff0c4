#!/usr/bin/env python3
"""Detect and invoke third-party tools (brew, npm, docker, ...) by table entry."""
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.models import ExternalTool

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 30


@dataclass
class ToolOutcome:
    ok: bool
    detail: str = ""


def _run_cmd(args: list, timeout: int = 10) -> Tuple[bool, str]:
    """Run command with list args (no shell). Returns (success, error_message)."""
    try:
        subprocess.run(
            args,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=True,
        )
        return True, ""
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip() or f"exit code {e.returncode}"
        return False, err
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
        return False, str(e)


def is_root() -> bool:
    return os.geteuid() == 0


def sudo_prefix(need_sudo: bool, use_sudo: bool = True) -> List[str]:
    if need_sudo and use_sudo and not is_root():
        return ["sudo"]
    return []


def find_binary(tool: ExternalTool) -> Optional[str]:
    for name in tool.binaries:
        path = shutil.which(name)
        if path:
            return path
    return None


def detect(tool: ExternalTool) -> Optional[str]:
    """Return the binary to use, or None when the tool is absent (or its probe fails)."""
    binary = find_binary(tool)
    if not binary:
        logger.debug("%s: none of %s on PATH", tool.key, ", ".join(tool.binaries))
        return None
    if tool.probe:
        ok, err = _run_cmd([binary, *tool.probe], timeout=PROBE_TIMEOUT)
        if not ok:
            logger.debug("%s: probe %s failed: %s", tool.key, " ".join(tool.probe), err)
            return None
    return binary


def invoke(tool: ExternalTool, binary: str, use_sudo: bool = True) -> ToolOutcome:
    """Run the tool's cleanup subcommand. Non-zero exit is a failed outcome, not an exception."""
    cmd = sudo_prefix(tool.sudo, use_sudo) + [binary, *tool.args]
    logger.debug("running %s", " ".join(cmd))
    ok, err = _run_cmd(cmd, timeout=tool.timeout)
    if not ok:
        return ToolOutcome(False, err.splitlines()[-1] if err else "failed")
    return ToolOutcome(True)


def resolve_cache_dir(tool: ExternalTool, binary: str) -> Optional[str]:
    """Ask the tool for its cache directory; only accept paths under ``cache_prefixes``."""
    if not tool.cache_query:
        return None
    try:
        out = subprocess.check_output(
            [binary, *tool.cache_query], text=True, errors="replace", timeout=10
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
        logger.debug("%s: cache query failed: %s", tool.key, e)
        return None
    if not out.strip():
        return None
    path = os.path.abspath(out.strip())
    for prefix in tool.cache_prefixes:
        if path == prefix or path.startswith(prefix + os.sep):
            return path
    logger.debug("%s: refusing cache dir outside known prefixes: %s", tool.key, path)
    return None
