"""Path, size and tool constants for mac-deepclean."""

import pathlib

HOME = str(pathlib.Path.home())

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

# Filesystem whose free-space counter is compared before and after a run
DISK_ROOT = "/"

# Preflight rows at or below this size are not listed
PREFLIGHT_THRESHOLD = MIB

# Unified log traces are only thinned once the store grows past this
DIAGNOSTICS_DIR = "/private/var/db/diagnostics"
DIAGNOSTICS_THRESHOLD = GIB
TRACE_DAYS_OLD = 3

INSTALLER_SANDBOX = "/Library/InstallerSandboxes/.PKInstallSandboxManager"
INSTALLER_SANDBOX_THRESHOLD = 100 * MIB

DOCKER_DATA = f"{HOME}/Library/Containers/com.docker.docker/Data"
DOCKER_DATA_WARN = 5 * GIB

IOS_BACKUPS = f"{HOME}/Library/Application Support/MobileSync/Backup"

BREW_CACHE_PREFIXES = [
    f"{HOME}/Library/Caches/Homebrew",
    "/opt/homebrew/Caches",
    "/usr/local/Caches",
]

TOOL_TIMEOUT = 600
SNAPSHOT_TIMEOUT = 120
