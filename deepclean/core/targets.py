"""Cleanup sections, their targets and tools, and the preflight table."""

from .constants import (
    HOME,
    BREW_CACHE_PREFIXES,
    DIAGNOSTICS_DIR,
    DIAGNOSTICS_THRESHOLD,
    DOCKER_DATA,
    DOCKER_DATA_WARN,
    INSTALLER_SANDBOX,
    INSTALLER_SANDBOX_THRESHOLD,
    IOS_BACKUPS,
    TRACE_DAYS_OLD,
)
from .models import (
    EntryFilter,
    ExternalTool,
    LocalSnapshots,
    Mode,
    ReclaimTarget,
    Section,
    SizeAdvisory,
)

CLEAR = Mode.CLEAR_CONTENTS
REMOVE = Mode.REMOVE_ENTIRELY

APP_SUPPORT = f"{HOME}/Library/Application Support"
XCODE = f"{HOME}/Library/Developer/Xcode"

# Sections gated by their own confirmation prompt
CONFIRMED_SECTIONS = {"ios_backups", "snapshots"}


def _user(path, label, mode=CLEAR, **kw):
    return ReclaimTarget(path=path, label=label, mode=mode, **kw)


def _system(path, label, mode=CLEAR, **kw):
    return ReclaimTarget(path=path, label=label, mode=mode, sudo=True, **kw)


def build_sections(trace_days_old=TRACE_DAYS_OLD):
    """Return the ordered cleanup sections."""
    return [
        Section("caches", "1. USER & SYSTEM CACHES", (
            _user(f"{HOME}/Library/Caches", "User Caches (~/Library/Caches)"),
            _system("/Library/Caches", "System Caches (/Library/Caches)"),
            _user(f"{HOME}/.cache", "General Cache (~/.cache)"),
            _system("/tmp", "Temp files (/tmp)"),
            _system("/private/var/tmp", "System temp (/private/var/tmp)"),
            _system(
                "/private/var/folders",
                "Font caches",
                match=EntryFilter(pattern="com.apple.FontRegistry", kind="dir"),
            ),
        )),
        Section("logs", "2. LOGS & DIAGNOSTIC REPORTS", (
            _user(f"{HOME}/Library/Logs", "User Logs"),
            _system("/private/var/log", "System Logs (/var/log)"),
            _system("/Library/Logs", "Library Logs"),
            _user(f"{HOME}/Library/Logs/DiagnosticReports", "User Crash Reports"),
            _system("/Library/Logs/DiagnosticReports", "System Crash Reports"),
            _system("/private/var/log/asl", "ASL Logs"),
            _system(
                DIAGNOSTICS_DIR,
                f"Old diagnostic traces (>{trace_days_old} days)",
                threshold_bytes=DIAGNOSTICS_THRESHOLD,
                match=EntryFilter(pattern="*.tracev3", older_than_days=trace_days_old),
            ),
        )),
        Section("xcode", "3. XCODE & DEVELOPER TOOLS", (
            _user(f"{XCODE}/DerivedData", "Xcode DerivedData"),
            _user(f"{XCODE}/Archives", "Xcode Archives", REMOVE),
            _user(f"{XCODE}/iOS DeviceSupport", "Xcode iOS DeviceSupport", REMOVE),
            _user(f"{XCODE}/iOS Device Logs", "Xcode Device Logs"),
            _user(f"{XCODE}/watchOS DeviceSupport", "Xcode watchOS DeviceSupport", REMOVE),
            _user(f"{HOME}/Library/Caches/com.apple.dt.Xcode", "Xcode Caches"),
            _user(f"{XCODE}/Index.noindex", "Xcode Index"),
            _user(
                f"{HOME}/Library/Saved Application State/com.apple.dt.Xcode.savedState",
                "Xcode Saved State",
                REMOVE,
            ),
            ExternalTool(
                key="simctl",
                label="Unavailable simulators removed",
                binaries=("xcrun",),
                args=("simctl", "delete", "unavailable"),
            ),
            _user(f"{HOME}/Library/Developer/CoreSimulator/Caches", "CoreSimulator Caches"),
            _system(
                INSTALLER_SANDBOX,
                "Xcode InstallerSandbox leftovers",
                threshold_bytes=INSTALLER_SANDBOX_THRESHOLD,
            ),
        )),
        Section("ios_backups", "4. OLD iOS DEVICE BACKUPS", (
            _user(
                IOS_BACKUPS,
                "iOS Backups",
                requires_confirmation=True,
                prompt="Delete ALL old iOS backups?",
                threshold_bytes=1,
            ),
        )),
        Section("snapshots", "5. TIME MACHINE LOCAL SNAPSHOTS", (
            LocalSnapshots(),
        )),
        Section("updates", "6. macOS UPDATE & INSTALL FILES", (
            _system("/Library/Updates", "macOS update downloads"),
            _system("/macOS Install Data", "macOS Install Data", REMOVE),
            _system("/Library/Application Support/Apple/SoftwareUpdate", "SoftwareUpdate cache"),
        )),
        Section("app_caches", "7. APPLICATION-SPECIFIC CACHES", (
            _user(f"{HOME}/Library/Saved Application State", "Saved Application States"),
            _user(f"{APP_SUPPORT}/Code/Cache", "VS Code Cache"),
            _user(f"{APP_SUPPORT}/Code/CachedData", "VS Code CachedData"),
            _user(f"{APP_SUPPORT}/Code/CachedExtensionVSIXs", "VS Code Extension Cache"),
            _user(f"{APP_SUPPORT}/Code/logs", "VS Code Logs"),
            _user(
                f"{APP_SUPPORT}/Google/Chrome/Default/Service Worker/CacheStorage",
                "Chrome SW Cache",
            ),
            _user(f"{APP_SUPPORT}/Google/Chrome/Default/Cache", "Chrome Cache"),
            _user(f"{APP_SUPPORT}/Google/Chrome/Default/Code Cache", "Chrome Code Cache"),
            _user(f"{HOME}/Library/Safari/LocalStorage", "Safari LocalStorage"),
            _user(f"{APP_SUPPORT}/Spotify/PersistentCache", "Spotify Cache"),
            _user(f"{HOME}/Library/Caches/com.spotify.client", "Spotify App Cache"),
            _user(f"{APP_SUPPORT}/Slack/Cache", "Slack Cache"),
            _user(f"{APP_SUPPORT}/Slack/Service Worker/CacheStorage", "Slack SW Cache"),
            _user(f"{APP_SUPPORT}/discord/Cache", "Discord Cache"),
            _user(f"{APP_SUPPORT}/Microsoft/Teams/Cache", "Teams Cache"),
            _user(
                f"{HOME}/Library/Containers/com.apple.mail/Data/Library/Mail Downloads",
                "Mail Downloads",
            ),
            _system(
                "/Library/Application Support/com.apple.idleassetsd/Customer",
                "Screensaver Downloads",
            ),
        )),
        Section("developer", "8. DEVELOPER TOOL CACHES", (
            _user(f"{HOME}/.gradle/caches", "Gradle Caches"),
            _user(f"{HOME}/.gradle/wrapper/dists", "Gradle Wrapper Dists"),
            _user(f"{HOME}/.dartServer/.analysis-driver", "Dart Analysis Cache"),
            _user(f"{HOME}/.pub-cache", "Pub Cache"),
            _user(f"{HOME}/Library/Caches/CocoaPods", "CocoaPods Cache"),
            _user(f"{HOME}/Library/Caches/org.carthage.CarthageKit", "Carthage Cache"),
            ExternalTool(
                key="go_cache",
                label="Go build cache cleaned",
                binaries=("go",),
                args=("clean", "-cache"),
            ),
            ExternalTool(
                key="go_testcache",
                label="Go test cache cleaned",
                binaries=("go",),
                args=("clean", "-testcache"),
            ),
            _user(f"{HOME}/.cache/go-build", "Go Build Cache"),
            _user(f"{HOME}/.cargo/registry/cache", "Cargo Registry Cache"),
            _user(f"{HOME}/.m2/repository", "Maven Local Repository"),
            _user(f"{HOME}/.android/cache", "Android Cache"),
            _user(f"{HOME}/.android/build-cache", "Android Build Cache"),
            _user(f"{HOME}/.composer/cache", "Composer Cache"),
            _user(f"{HOME}/.gem", "Ruby Gems Cache"),
            _user(f"{HOME}/.bundle/cache", "Bundler Cache"),
        )),
        Section("package_managers", "9. PACKAGE MANAGER CLEANUP", (
            ExternalTool(
                key="npm",
                label="npm cache cleaned",
                binaries=("npm",),
                args=("cache", "clean", "--force"),
            ),
            _user(f"{HOME}/.npm/_cacache", "npm cache dir"),
            ExternalTool(
                key="yarn",
                label="yarn cache cleaned",
                binaries=("yarn",),
                args=("cache", "clean"),
            ),
            ExternalTool(
                key="pnpm",
                label="pnpm store pruned",
                binaries=("pnpm",),
                args=("store", "prune"),
            ),
            _user(f"{HOME}/.bun/install/cache", "Bun cache"),
            ExternalTool(
                key="brew",
                label="Homebrew cache cleaned",
                binaries=("brew",),
                args=("cleanup", "--prune=all", "-s"),
                cache_query=("--cache",),
                cache_prefixes=tuple(BREW_CACHE_PREFIXES),
            ),
            ExternalTool(
                key="pip",
                label="pip cache purged",
                binaries=("pip3", "pip"),
                args=("cache", "purge"),
            ),
        )),
        Section("docker", "10. DOCKER CLEANUP", (
            ExternalTool(
                key="docker",
                label="Docker full prune done (images + volumes + containers)",
                binaries=("docker",),
                args=("system", "prune", "-af", "--volumes"),
                probe=("info",),
                quiet_when_absent=False,
            ),
            ExternalTool(
                key="docker_builder",
                label="Docker build cache pruned",
                binaries=("docker",),
                args=("builder", "prune", "-af"),
                probe=("info",),
            ),
            SizeAdvisory(
                path=DOCKER_DATA,
                label="Docker data",
                threshold_bytes=DOCKER_DATA_WARN,
                hint="Start Docker and run 'docker system prune -af --volumes' to reclaim space.",
                when_absent="docker",
            ),
        )),
        Section("trash", "11. TRASH & MISC", (
            _user(f"{HOME}/.Trash", "User Trash"),
            ExternalTool(
                key="dns",
                label="DNS cache flushed",
                binaries=("dscacheutil",),
                args=("-flushcache",),
                sudo=True,
            ),
            ExternalTool(
                key="purge",
                label="Memory/disk purge triggered",
                binaries=("purge",),
                args=(),
                sudo=True,
            ),
            _user(f"{APP_SUPPORT}/com.apple.spotlight", "Spotlight user data"),
            _user(f"{APP_SUPPORT}/com.apple.sharedfilelist", "Shared File Lists"),
            _user(f"{HOME}/Library/Metadata/CoreSpotlight", "CoreSpotlight index"),
        )),
    ]


SECTIONS = build_sections()
SECTION_KEYS = [s.key for s in SECTIONS]

# (path, label) pairs measured for the preflight estimate
PREFLIGHT_TARGETS = [
    (f"{HOME}/Library/Caches", "User Caches"),
    ("/Library/Caches", "System Caches"),
    (f"{HOME}/Library/Logs", "User Logs"),
    ("/private/var/log", "System Logs"),
    (f"{HOME}/.Trash", "Trash"),
    (f"{XCODE}/DerivedData", "Xcode DerivedData"),
    (f"{XCODE}/Archives", "Xcode Archives"),
    (f"{XCODE}/iOS DeviceSupport", "Xcode DeviceSupport"),
    (f"{HOME}/Library/Developer/CoreSimulator", "Xcode Simulators"),
    (IOS_BACKUPS, "iOS Backups"),
    (f"{HOME}/.gradle/caches", "Gradle Cache"),
    (f"{HOME}/.cache", "General Cache (~/.cache)"),
    (f"{HOME}/.pub-cache", "Pub Cache"),
    (f"{HOME}/.npm", "npm Cache"),
    (f"{APP_SUPPORT}/Code/Cache", "VS Code Cache"),
    (f"{APP_SUPPORT}/Code/CachedData", "VS Code CachedData"),
    (f"{HOME}/Library/Containers/com.docker.docker", "Docker Data"),
]
