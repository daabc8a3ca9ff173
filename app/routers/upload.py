# =============================================================================
# app/routers/upload.py - File Upload
# =============================================================================
# Accepts one media file as multipart field `file` and stores it in the
# bucket. AI metadata for it appears later, written by the analysis pipeline.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.dependencies import UploadServiceDep
from app.exceptions import NoFileProvidedError
from core.models.media import UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    upload_service: UploadServiceDep,
    file: Annotated[UploadFile | None, File(description="Audio, video or image file")] = None,
):
    """
    Upload a media file.

    This endpoint:
    1. Validates size (100MB max) and extension
    2. Stores the bytes under "{epoch_millis}-{sanitized name}"
    3. Returns the storage key and a 24-hour download link

    Validation failures return 400 and nothing is written.
    """
    if file is None or not file.filename:
        raise NoFileProvidedError()

    content = await file.read()

    uploaded = await run_in_threadpool(
        upload_service.upload,
        content,
        file.filename,
        file.content_type,
    )

    return UploadResponse(file=uploaded)
