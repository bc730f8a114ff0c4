"""Confirmation providers: ``(prompt) -> bool``."""
from rich.markup import escape

from . import output


def console_confirm(prompt):
    """Ask on the terminal. Only ``y``/``Y`` confirms; EOF declines."""
    # Escape [y/N] so Rich doesn't treat it as markup (style tag)
    try:
        ans = output.console.input(f"  [cyan]{escape(prompt)} {escape('[y/N]')}: [/]")
    except EOFError:
        return False
    return ans.strip() in ("y", "Y")


def assume_yes(prompt):
    return True


def assume_no(prompt):
    return False
