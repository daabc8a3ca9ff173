# =============================================================================
# core/models/media.py - Media Library Schemas
# =============================================================================
# These models define the API contract for the media library:
# - FileType / FileStatus: enums for file kind and processing status
# - AIAnalysis: projection of the analysis pipeline's metadata document
# - ReconciledFile: one bucket object joined with its metadata document
# - UploadedFile: what POST /upload returns
# - *Response: envelopes returned by the routers
#
# Field names are snake_case in Python and camelCase on the wire
# (e.g. `has_metadata` <-> "hasMetadata").
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FileType(str, Enum):
    """
    Kind of media file.

    Derived from the content type prefix when listing, and from the
    extension when uploading. The two can disagree for mislabeled files.
    """
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"

    @classmethod
    def from_content_type(cls, content_type: str | None) -> "FileType":
        """Classify by MIME prefix: image/*, video/*, audio/*, else unknown."""
        content_type = content_type or ""
        for kind in (cls.IMAGE, cls.VIDEO, cls.AUDIO):
            if content_type.startswith(f"{kind.value}/"):
                return kind
        return cls.UNKNOWN


class FileStatus(str, Enum):
    """
    Processing status of a file, recomputed on every listing.

    - uploaded: No metadata yet, uploaded recently (analysis expected soon)
    - processing: No metadata yet, uploaded longer ago than the threshold
    - completed: A metadata document exists for the file
    - error: Reserved; never assigned by the reconciliation logic
    """
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class CamelModel(BaseModel):
    """Base model that serializes field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


# =============================================================================
# AI Analysis
# =============================================================================

class AIAnalysis(CamelModel):
    """
    The parts of a metadata document shown alongside a file.

    Example:
        {
            "tags": ["beach", "sunset"],
            "transcript": "",
            "extractedText": "",
            "scenes": [],
            "topics": ["travel"]
        }
    """

    tags: list[str] = Field(default_factory=list, description="Labels (falls back to object_tags)")
    transcript: str = Field(default="", description="Speech transcription (audio/video)")
    extracted_text: str = Field(default="", description="Text found in the media (OCR)")
    scenes: list[Any] = Field(default_factory=list, description="Detected scenes (video)")
    topics: list[str] = Field(default_factory=list, description="Detected topics")

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "AIAnalysis":
        """Project a metadata document; absent or null fields become empty."""
        return cls(
            tags=doc.get("tags") or doc.get("object_tags") or [],
            transcript=doc.get("transcription") or "",
            extracted_text=doc.get("extractedText") or "",
            scenes=doc.get("scenes") or [],
            topics=doc.get("topics") or [],
        )

    def searchable_text(self) -> list[str]:
        """Every string the free-text search looks at."""
        return [*self.tags, *self.topics, self.transcript, self.extracted_text]


# Fields that must be non-empty for a document to count as complete, per kind
REQUIRED_METADATA_FIELDS: dict[FileType, tuple[str, ...]] = {
    FileType.IMAGE: ("tags", "object_tags"),
    FileType.VIDEO: ("tags", "object_tags", "transcription", "topics"),
    FileType.AUDIO: ("transcription", "topics"),
    FileType.UNKNOWN: (),
}


def missing_metadata_fields(doc: dict[str, Any], file_type: FileType | str) -> list[str]:
    """
    List the analysis fields still missing from a metadata document.

    The pipeline fills fields in stages, so a document can exist while some
    of its results are still pending.
    """
    required = REQUIRED_METADATA_FIELDS.get(FileType(file_type), ())
    return [name for name in required if not doc.get(name)]


def is_metadata_complete(doc: dict[str, Any], file_type: FileType | str) -> bool:
    return not missing_metadata_fields(doc, file_type)


# =============================================================================
# Files
# =============================================================================

class ReconciledFile(CamelModel):
    """
    One bucket object joined with its metadata document (if any).

    Built fresh on every request; never persisted.
    """

    # Storage key, doubling as the public identifier
    id: str = Field(..., description="Storage key")
    name: str = Field(..., description="Original upload name, else the storage key")
    file_name: str = Field(..., description="Storage key (join key into the metadata store)")
    file_type: FileType = Field(..., description="Kind derived from content type")
    size: int = Field(..., ge=0, description="Size in bytes")
    content_type: str = Field(default="", description="MIME type stored with the object")
    status: FileStatus = Field(..., description="Processing status")
    created_at: datetime = Field(..., description="When the object was created in storage")
    download_url: str = Field(..., description="Time-limited signed read link")
    preview_url: str | None = Field(default=None, description="Thumbnail or inline preview")
    public_url: str = Field(..., description="Permanent object URL")
    has_metadata: bool = Field(..., description="Whether AI metadata exists")
    ai_analysis: AIAnalysis | None = Field(default=None, description="AI metadata projection")


class UploadedFile(CamelModel):
    """
    Response body describing a freshly uploaded file.

    Status is always "uploaded": metadata arrives later from the pipeline.
    """

    id: str
    name: str
    file_name: str
    size: int
    content_type: str
    file_type: FileType
    status: FileStatus = FileStatus.UPLOADED
    created_at: datetime
    download_url: str
    preview_url: str | None = None
    public_url: str


# =============================================================================
# Response Envelopes
# =============================================================================

class FileListResponse(CamelModel):
    """Returned by GET /files."""

    success: bool = True
    files: list[ReconciledFile]
    total: int = Field(..., ge=0, description="Matches before pagination")
    limit: int
    offset: int


class FileDetailResponse(CamelModel):
    """Returned by GET /files/{id}."""

    success: bool = True
    file: ReconciledFile


class UploadResponse(CamelModel):
    """Returned by POST /upload."""

    success: bool = True
    file: UploadedFile


class DeleteResponse(CamelModel):
    """Returned by DELETE /files/{id}."""

    success: bool = True
    message: str
