from datetime import datetime, timezone
from typing import Generic, List, Literal, Optional, Set, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ObjectRecord(BaseModel):
    """One source object as reported by a listing page."""
    model_config = ConfigDict(frozen=True)

    key: str
    created_at: datetime
    content_type: Optional[str] = None
    size: Optional[int] = None
    content_encoding: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # Naive timestamps are taken to be UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def download_size(self) -> Optional[int]:
        """Byte count a download must have, or None when it can't be known.

        Objects stored with a Content-Encoding (e.g. gzip) are decoded on
        download, so their stored size says nothing about the buffer length.
        """
        if self.content_encoding:
            return None
        return self.size


class Page(BaseModel, Generic[T]):
    items: List[T] = Field(default_factory=list)
    next_token: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return not self.next_token


class ScanSummary(BaseModel):
    recent_folders: Set[str] = Field(default_factory=set)
    all_folders: Set[str] = Field(default_factory=set)
    objects_scanned: int = 0
    pages_fetched: int = 0


class TransferTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_key: str
    content_type: str = DEFAULT_CONTENT_TYPE
    expected_size: Optional[int] = None

    @classmethod
    def from_record(cls, rec: ObjectRecord) -> "TransferTask":
        return cls(
            source_key=rec.key,
            content_type=rec.content_type or DEFAULT_CONTENT_TYPE,
            expected_size=rec.download_size,
        )


class TransferResult(BaseModel):
    key: str
    status: Literal["transferred", "skipped", "failed"]
    attempts: int = 0
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "transferred"


class FolderPlan(BaseModel):
    folder: str
    prefix: str
    source_count: int = 0
    existing_count: int = 0
    tasks: List[TransferTask] = Field(default_factory=list)
    already_migrated: bool = False  # presence-check found something at the destination


class ProgressCounters(BaseModel):
    folders_migrated: int = 0
    total_folders: int = 0
    # files_transferred / total_files_in_folder are reset for every folder
    files_transferred: int = 0
    total_files_in_folder: int = 0
    total_files_transferred: int = 0
    files_skipped: int = 0
    files_failed: int = 0

    @property
    def folders_remaining(self) -> int:
        return self.total_folders - self.folders_migrated
