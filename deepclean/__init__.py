"""mac-deepclean: reclaim macOS System Data (caches, logs, backups, snapshots)."""

__version__ = "0.1.0"

from . import core
from . import utils
from . import services

__all__ = ["core", "utils", "services", "__version__"]
