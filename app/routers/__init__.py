# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - files.py: Library listing, detail, download and delete
# - upload.py: Media file upload
# - metadata.py: AI metadata lookup
# - search.py: Proxy to the external search function
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import files
from . import upload
from . import metadata
from . import search

__all__ = [
    "health",
    "files",
    "upload",
    "metadata",
    "search",
]
