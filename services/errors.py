"""
MIGRATION ERRORS
================
Error taxonomy for the GCS → R2 pipeline.

    ListError      — a source or destination listing page failed. Fatal.
    DownloadError  — one source object could not be fetched. Retried, then skipped.
    UploadError    — one destination write failed. Not retried.
    ConfigurationError — settings could not be loaded or are invalid.
"""


class MigrationError(Exception):
    """Base error for the project."""


class ConfigurationError(MigrationError):
    pass


class ListError(MigrationError):
    def __init__(self, store: str, prefix: str, cause: Exception | None = None):
        self.store = store
        self.prefix = prefix
        self.cause = cause
        msg = f"Failed to list {store} objects under '{prefix}'"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class DownloadError(MigrationError):
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Download failed for '{key}': {reason}")


class UploadError(MigrationError):
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Upload failed for '{key}': {reason}")
