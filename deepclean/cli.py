#!/usr/bin/env python3
"""Command-line interface for mac-deepclean."""
import argparse
import json
import logging
import sys

import questionary
from questionary import Choice
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from .core import config as config_module
from .core.constants import DISK_ROOT, MIB
from .core.results import FatalEnvironmentError
from .core.targets import CONFIRMED_SECTIONS, SECTION_KEYS, build_sections
from .services import cleanup_service as cleanup
from .services import scanner_service as scanner
from .utils import output
from .utils.disk import disk_usage_line, format_bytes
from .utils.prompt import assume_yes, console_confirm

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def print_banner() -> None:
    output.console.print(
        Panel(
            "[bold]macOS System Data Deep Cleaner[/]\n[dim]Reclaim space from caches, logs, snapshots and old backups[/]",
            border_style="cyan",
            padding=(0, 2),
        )
    )


def print_scan(cfg: dict, root: str = DISK_ROOT) -> None:
    """Current disk usage plus the estimated cleanable sizes (advisory only)."""
    console = output.console
    output.log_header("CURRENT DISK USAGE")
    console.print(f"  {disk_usage_line(root)}")
    console.print()
    threshold = int(cfg.get("preflight_threshold_mb", 1)) * MIB
    report = scanner.build_preflight_report(threshold=threshold)
    console.print("  [bold]Estimated cleanable sizes:[/]")
    table = Table(show_header=True, header_style="bold cyan", box=None, padding=(0, 2))
    table.add_column("Category", style="")
    table.add_column("Size", justify="right", style="yellow")
    for label, size in report.rows:
        table.add_row(escape(label), format_bytes(size))
    if report.snapshot_count:
        table.add_row(
            "Time Machine Snapshots",
            f"{report.snapshot_count} snapshots (can be multi-GB each)",
        )
    console.print(table)
    console.print()
    console.print(f"  [bold green]Estimated total cleanable: {format_bytes(report.total)}[/] (+ snapshots)")
    console.print()


def _prompt_choices_tui(sections: list):
    """Interactive checkbox TUI (space to toggle, enter to confirm)."""
    choices = [Choice(s.title, value=s.key, checked=True) for s in sections]
    msg = "Select sections to clean: SPACE to toggle, ENTER to confirm."
    while True:
        result = questionary.checkbox(msg, choices=choices).ask()
        if result is None:
            return []  # Ctrl+C
        if not result:
            output.console.print("[yellow]No section selected. Use SPACE to mark sections, then ENTER. Ctrl+C to exit.[/]\n")
            msg = "Select at least one (SPACE to toggle, ENTER to confirm):"
            continue
        return [s for s in sections if s.key in result]


def prompt_choices(sections: list):
    """Let the user pick sections; checkbox on a TTY, numbered list otherwise."""
    if sys.stdin.isatty():
        return _prompt_choices_tui(sections)
    console = output.console
    console.print()
    console.print("[cyan]Select sections to clean (comma-separated numbers).[/]\n")
    for i, s in enumerate(sections, 1):
        console.print(f"  [bold]{i})[/] {escape(s.title)}")
    console.print(f"  [bold]{len(sections) + 1})[/] Everything above")
    try:
        choice = console.input("\n[cyan]Your choice: [/]").strip()
    except EOFError:
        return []
    if not choice:
        return []
    if choice == str(len(sections) + 1):
        return sections
    picked = []
    for part in choice.split(","):
        part = part.strip()
        if part.isdigit():
            n = int(part)
            if 1 <= n <= len(sections) and sections[n - 1] not in picked:
                picked.append(sections[n - 1])
    return picked


def print_summary(report, root: str = DISK_ROOT) -> None:
    console = output.console
    output.log_header("DRY RUN COMPLETE" if report.dry_run else "CLEANUP COMPLETE")
    console.print()
    if report.dry_run:
        console.print(f"  [bold green]Would free (tracked):       {format_bytes(report.would_free)}[/]")
    console.print(f"  [bold green]Estimated freed (tracked):  {format_bytes(report.estimated_total_freed)}[/]")
    console.print(f"  [bold green]Actual disk space gained:   {format_bytes(report.actual_freed_bytes)}[/]")
    failures = report.failures
    if failures:
        console.print()
        console.print(f"  [yellow]{len(failures)} warning(s):[/]")
        table = Table(show_header=True, header_style="bold yellow", box=None, padding=(0, 2))
        table.add_column("Kind", style="dim")
        table.add_column("Target")
        table.add_column("Detail", style="dim")
        for f in failures:
            table.add_row(f.kind.value, escape(f.label), escape(f.detail))
        console.print(table)
    console.print()
    try:
        console.print(f"  {disk_usage_line(root).replace('Disk:', 'Disk now:', 1)}")
    except FatalEnvironmentError as e:
        output.log_warn(str(e))
    console.print()
    console.print("  [cyan]Tip: Restart your Mac for macOS to fully reclaim purgeable space.[/]")
    console.print("  [cyan]Tip: Check Storage in System Settings — it may take a few minutes to update.[/]")
    console.print()


def _list_sections() -> None:
    """List the sections."""
    console = output.console
    console.print(Rule("[bold cyan]🧹 mac-deepclean — Sections[/]", style="cyan"))
    console.print()
    table = Table(show_header=True, header_style="bold cyan", box=None, padding=(0, 2))
    table.add_column("Key", style="cyan")
    table.add_column("Section", style="")
    table.add_column("Steps", justify="right")
    table.add_column("Note", style="dim yellow")
    for s in build_sections():
        note = "(asks for confirmation)" if s.key in CONFIRMED_SECTIONS else ""
        table.add_row(s.key, escape(s.title), str(len(s.steps)), note)
    console.print(table)
    console.print()


def _run_config(argv: list) -> None:
    """Run the configuration tasks."""
    console = output.console
    p = argparse.ArgumentParser(prog="mac-deepclean config", description="Manage configuration.")
    p.add_argument("--init", action="store_true", help="Create default config file")
    p.add_argument("--show", action="store_true", help="Show current config")
    args = p.parse_args(argv)
    if args.init:
        path = config_module.init_config()
        console.print(Rule("[bold cyan]Config[/]", style="cyan"))
        console.print()
        console.print(f"  [green]✓[/] Created config at [cyan]{escape(path)}[/]")
        console.print()
        return
    if args.show:
        if not config_module.config_exists():
            console.print("[yellow]No config found. Run: mac-deepclean config --init[/]")
            return
        cfg = config_module.load()
        console.print(Rule("[bold cyan]Config[/]", style="cyan"))
        console.print()
        console.print(escape(json.dumps(cfg, indent=2)))
        console.print()
        return
    p.print_help()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mac-deepclean",
        description="Reclaim macOS System Data: caches, logs, old backups and local snapshots.",
        epilog="Subcommands: sections, config",
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Answer yes to every prompt.")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be deleted without deleting.")
    parser.add_argument("--only", nargs="+", metavar="KEY", help="Run only these sections.")
    parser.add_argument("--skip", nargs="+", metavar="KEY", help="Skip these sections.")
    parser.add_argument("--interactive", action="store_true", help="Choose sections interactively.")
    parser.add_argument("--scan", action="store_true", help="Just scan and report sizes.")
    parser.add_argument("--json", action="store_true", help="Print the run report as JSON on stdout.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def main(argv=None):
    """Main function."""
    argv = argv if argv is not None else sys.argv[1:]
    if argv and argv[0] == "sections":
        _list_sections()
        return
    if argv and argv[0] == "config":
        _run_config(argv[1:])
        return

    args = build_parser().parse_args(argv)
    cfg = config_module.load()
    setup_logging("DEBUG" if args.verbose else cfg["log_level"])
    if args.json:
        output.use_stderr()
    console = output.console

    for k in (args.only or []) + (args.skip or []):
        if k not in SECTION_KEYS:
            console.print(f"[red]Unknown section: {escape(k)}[/]")
            console.print(f"[dim]Valid keys: {', '.join(SECTION_KEYS)}[/]")
            sys.exit(1)

    sections = build_sections(cfg["trace_days_old"])
    selected = scanner.visible_sections(cfg, args.only, args.skip, sections)

    print_banner()
    try:
        print_scan(cfg)
    except FatalEnvironmentError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)
    if args.scan:
        return

    if args.interactive:
        selected = prompt_choices(selected)
    if not selected:
        console.print("[yellow]No sections selected. Exiting.[/]")
        sys.exit(0)

    confirm = assume_yes if args.yes else console_confirm
    console.print("  [bold red]WARNING: This will delete caches, logs, old backups, and temp files.[/]")
    console.print("  All deleted data is regenerable (caches/logs) or old backups.")
    console.print("  Your apps, documents, photos, and system files are NOT touched.")
    console.print()
    if not confirm("Proceed with deep clean?"):
        console.print("\n  [red]Cancelled.[/]")
        sys.exit(0)

    try:
        report = cleanup.run_all(
            selected,
            confirm,
            dry_run=args.dry_run,
            use_sudo=cfg["use_sudo"],
            exclude_targets=cfg["exclude_targets"],
        )
    except FatalEnvironmentError as e:
        logger.debug("aborting", exc_info=True)
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)

    print_summary(report)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))


if __name__ == "__main__":
    main()
