"""
MIGRATION CONFIGURATION
=======================
All settings are static for a run and come from the environment (or a
local .env file). Cloudflare R2 settings accept both the
CLOUDFLARE_R2_* and the short R2_* names so an existing .env works
regardless of prefix.

    GCS_BUCKET_NAME=my-gcp-bucket
    GCS_ROOT_PREFIX=exports/
    FOLDER_DATE_CHECK_FILE=template.js
    MIGRATION_MINIMUM_DATE=2025-03-10T00:00:00Z

    CLOUDFLARE_R2_ACCOUNT_ID=...
    CLOUDFLARE_R2_BUCKET=...
    CLOUDFLARE_R2_ACCESS_KEY_ID=...
    CLOUDFLARE_R2_SECRET_ACCESS_KEY=...
"""

import os
from datetime import datetime, timezone
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from services.errors import ConfigurationError
from utils import normalize_prefix

DEFAULT_MINIMUM_DATE = "2025-03-10T00:00:00Z"

FolderPolicy = Literal["date_filtered", "full"]
DiffStrategyName = Literal["full_diff", "presence_check"]


class MigrationConfig(BaseModel):
    # Source (Google Cloud Storage)
    gcs_bucket: str = Field(min_length=1)
    gcs_root_prefix: str = ""
    gcs_project: Optional[str] = None

    # Destination (Cloudflare R2 / any S3-compatible store)
    r2_bucket: str = Field(min_length=1)
    r2_access_key_id: str = Field(min_length=1)
    r2_secret_access_key: str = Field(min_length=1)
    r2_account_id: Optional[str] = None
    r2_endpoint: Optional[str] = None
    r2_region: str = "auto"

    # Folder discovery
    folder_policy: FolderPolicy = "date_filtered"
    marker_filename: Optional[str] = None
    minimum_date: datetime = datetime(2025, 3, 10, tzinfo=timezone.utc)

    # Transfer tuning
    page_size: int = Field(default=1000, ge=1, le=1000)
    concurrency: int = Field(default=8, ge=1)
    diff_strategy: DiffStrategyName = "full_diff"
    download_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)

    @field_validator("gcs_root_prefix")
    @classmethod
    def _normalize_root(cls, v: str) -> str:
        return normalize_prefix(v)

    @field_validator("minimum_date")
    @classmethod
    def _cutoff_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_consistency(self) -> "MigrationConfig":
        if not self.r2_endpoint:
            if not self.r2_account_id:
                raise ValueError("R2 endpoint or account id is required")
            self.r2_endpoint = f"https://{self.r2_account_id}.r2.cloudflarestorage.com"
        if self.folder_policy == "date_filtered" and not self.marker_filename:
            raise ValueError("marker_filename is required for the date_filtered folder policy")
        return self


def _first(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def load_config(env: Mapping[str, str] | None = None) -> MigrationConfig:
    """Build a MigrationConfig from the environment (loads .env first when env is None)."""
    if env is None:
        load_dotenv()
        env = os.environ

    raw = {
        "gcs_bucket": _first(env, "GCS_BUCKET_NAME", "GCP_BUCKET_NAME"),
        "gcs_root_prefix": _first(env, "GCS_ROOT_PREFIX", "GCP_INTERNAL_PATH"),
        "gcs_project": _first(env, "GOOGLE_CLOUD_PROJECT"),
        "r2_bucket": _first(env, "CLOUDFLARE_R2_BUCKET", "R2_BUCKET", "R2_BUCKET_NAME"),
        "r2_access_key_id": _first(env, "CLOUDFLARE_R2_ACCESS_KEY_ID", "R2_ACCESS_KEY_ID"),
        "r2_secret_access_key": _first(env, "CLOUDFLARE_R2_SECRET_ACCESS_KEY", "R2_SECRET_ACCESS_KEY"),
        "r2_account_id": _first(env, "CLOUDFLARE_R2_ACCOUNT_ID", "R2_ACCOUNT_ID"),
        "r2_endpoint": _first(env, "CLOUDFLARE_R2_ENDPOINT", "R2_ENDPOINT_URL"),
        "folder_policy": _first(env, "MIGRATION_FOLDER_POLICY"),
        "marker_filename": _first(env, "FOLDER_DATE_CHECK_FILE"),
        "minimum_date": _first(env, "MIGRATION_MINIMUM_DATE") or DEFAULT_MINIMUM_DATE,
        "page_size": _first(env, "MIGRATION_BATCH_SIZE"),
        "concurrency": _first(env, "MIGRATION_CONCURRENCY"),
        "diff_strategy": _first(env, "MIGRATION_DIFF_STRATEGY"),
        "download_attempts": _first(env, "MIGRATION_DOWNLOAD_ATTEMPTS"),
        "retry_delay": _first(env, "MIGRATION_RETRY_DELAY"),
    }
    # Unset values fall back to the model defaults
    data = {k: v for k, v in raw.items() if v is not None}

    try:
        return MigrationConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid migration settings: {e}") from e
