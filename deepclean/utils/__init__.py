"""Utilities for mac-deepclean: disk measurement, output, prompts."""

from . import disk
from . import output
from . import prompt

__all__ = ["disk", "output", "prompt"]
