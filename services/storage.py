import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from models import DEFAULT_CONTENT_TYPE, Page
from services.config import MigrationConfig
from services.errors import ListError, UploadError

# Logger for storage operations
logger = logging.getLogger(__name__)


def create_r2_client(config: MigrationConfig):
    """Build the boto3 S3 client pointed at the R2 endpoint."""
    logger.info("R2 bucket: %s", config.r2_bucket)
    logger.info("R2 endpoint: %s", config.r2_endpoint)
    return boto3.client(
        "s3",
        aws_access_key_id=config.r2_access_key_id,
        aws_secret_access_key=config.r2_secret_access_key,
        endpoint_url=config.r2_endpoint,
        region_name=config.r2_region,
        config=Config(s3={"addressing_style": "path"}),
    )


class R2Destination:
    """S3-compatible destination: prefix listing and single-object upload."""

    def __init__(self, client, bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

    @classmethod
    def from_config(cls, config: MigrationConfig) -> "R2Destination":
        return cls(create_r2_client(config), config.r2_bucket)

    def list_objects(self, prefix: str, max_keys: Optional[int] = None, token: Optional[str] = None) -> Page[str]:
        kwargs = {"Bucket": self.bucket_name, "Prefix": prefix}
        if max_keys:
            kwargs["MaxKeys"] = max_keys
        if token:
            kwargs["ContinuationToken"] = token
        try:
            resp = self.client.list_objects_v2(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise ListError("R2", prefix, e) from e

        keys = [obj["Key"] for obj in resp.get("Contents", []) if obj.get("Key")]
        next_token = resp.get("NextContinuationToken") if resp.get("IsTruncated") else None
        return Page[str](items=keys, next_token=next_token)

    def put_object(self, key: str, body: bytes, content_type: Optional[str] = None) -> dict:
        try:
            return self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type or DEFAULT_CONTENT_TYPE,
            )
        except (ClientError, BotoCoreError) as e:
            code = ""
            if isinstance(e, ClientError):
                code = e.response.get("Error", {}).get("Code", "")
            reason = f"{code}: {e}" if code else str(e)
            raise UploadError(key, reason) from e
