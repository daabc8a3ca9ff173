# =============================================================================
# app/routers/metadata.py - AI Metadata Lookup
# =============================================================================
# Returns the analysis pipeline's document for one file. A missing document
# is a normal response (success=false) with debug context, not an error.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path
from fastapi.concurrency import run_in_threadpool

from app.dependencies import FileServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/metadata/{file_name:path}")
async def get_metadata(
    file_name: Annotated[str, Path(description="Storage key (or original name)")],
    file_service: FileServiceDep,
):
    """
    Get AI metadata for a file.

    Looks up by storage key first, then by original name. The response adds
    `isComplete` and `missingFields` so clients can tell partial analysis
    from finished analysis.
    """
    return await run_in_threadpool(file_service.lookup_metadata, file_name)
