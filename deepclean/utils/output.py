"""Shared rich console and progress-line helpers."""
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule

console = Console()


def use_stderr():
    """Send progress output to stderr (stdout is reserved for JSON)."""
    global console
    console = Console(stderr=True)


def log_header(title):
    console.print()
    console.print(Rule(f"[bold]{escape(title)}[/]", style="cyan"))


def log_info(msg):
    console.print(f"  [green]✓[/] {escape(msg)}")


def log_warn(msg):
    console.print(f"  [yellow]⚠[/] {escape(msg)}")


def log_skip(label, why="not found, skipping"):
    console.print(f"  [dim]- {escape(label)} ({why})[/]")


def log_dim(msg):
    console.print(f"  [dim]{escape(msg)}[/]")
