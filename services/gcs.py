"""
GCS SOURCE
==========
Thin wrapper around google-cloud-storage exposing only what the migration
needs: one-page-per-call listing with creation time / content type, and
buffered download of a single object.
"""

import logging
from typing import Optional

from google.cloud import storage

from models import ObjectRecord, Page
from services.errors import DownloadError, ListError

logger = logging.getLogger(__name__)


class GCSSource:
    def __init__(self, bucket_name: str, client: Optional[storage.Client] = None, project: Optional[str] = None):
        self.bucket_name = bucket_name
        self.client = client or storage.Client(project=project)
        self.bucket = self.client.bucket(bucket_name)

    def list_objects(self, prefix: str, page_size: int, token: Optional[str] = None) -> Page[ObjectRecord]:
        """Fetch a single listing page. Exactly one request per call."""
        try:
            blobs = self.client.list_blobs(
                self.bucket_name,
                prefix=prefix,
                page_size=page_size,
                page_token=token,
            )
            page = next(blobs.pages, None)
            items = []
            if page is not None:
                for blob in page:
                    items.append(
                        ObjectRecord(
                            key=blob.name,
                            created_at=blob.time_created,
                            content_type=blob.content_type,
                            size=blob.size,
                            content_encoding=blob.content_encoding,
                        )
                    )
            next_token = blobs.next_page_token
        except Exception as e:
            raise ListError("GCS", prefix, e) from e

        return Page[ObjectRecord](items=items, next_token=next_token or None)

    def download_object(self, key: str) -> bytes:
        try:
            data = self.bucket.blob(key).download_as_bytes()
        except Exception as e:
            raise DownloadError(key, str(e)) from e
        if data is None:
            raise DownloadError(key, "Downloaded buffer is null or undefined.")
        return data
