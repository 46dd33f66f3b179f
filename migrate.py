"""
GCS → R2 FOLDER MIGRATION
=========================
Copies folders from a Google Cloud Storage bucket to Cloudflare R2 (or any
S3-compatible store), keeping the exact key layout. By default only folders
whose marker file was created on or after MIGRATION_MINIMUM_DATE are copied,
and objects already present in R2 are skipped, so the script can simply be
re-run after a partial failure.

Usage:
    python migrate.py

All settings come from the environment / .env (see services/config.py).
GCP credentials are picked up the usual way (GOOGLE_APPLICATION_CREDENTIALS
or application default credentials).
"""

import os
import sys
import asyncio
import logging
import sentry_sdk
from logtail import LogtailHandler
from dotenv import load_dotenv

# Load env immediately
load_dotenv()

# Initialize Sentry
SENTRY_DSN = os.getenv("SENTRY_DSN")
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        traces_sample_rate=1.0,
    )

# Initialize Centralized Logging (BetterStack)
LOGTAIL_SOURCE_TOKEN = os.getenv("LOGTAIL_SOURCE_TOKEN")
logger = logging.getLogger("migrate")


def configure_logging():
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    # Console output is the progress report, keep it on in every mode
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stdout)
    if LOGTAIL_SOURCE_TOKEN:
        root.addHandler(LogtailHandler(source_token=LOGTAIL_SOURCE_TOKEN))


from services.config import load_config
from services.migration import run_migration


def main():
    configure_logging()
    try:
        config = load_config()
        asyncio.run(run_migration(config))
    except Exception as e:
        logger.exception("❌ An overall error occurred: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
