"""Services (business logic) for mac-deepclean."""

from . import tools_service
from . import reclaim_service
from . import snapshot_service
from . import scanner_service
from . import cleanup_service

__all__ = ["tools_service", "reclaim_service", "snapshot_service", "scanner_service", "cleanup_service"]
