"""
MIGRATION ORCHESTRATOR
======================
One pass, no loops back:

    SCAN → CLASSIFY → (per folder: DIFF → TRANSFER) → DONE

Folders are processed strictly one after another; a folder's transfers all
finish before the next folder is diffed. Progress is logged after every
listing page, every transferred file and every folder.

Listing failures propagate out of run() and abort the whole migration.
"""

import logging
from typing import List

from models import FolderPlan, ProgressCounters, TransferResult
from services.classifier import FolderClassifier
from services.config import MigrationConfig
from services.differ import DiffStrategy, get_strategy
from services.executor import create_executor, shutdown_executor
from services.lister import SourceLister
from services.transfer import TransferPool
from utils import folder_prefix

logger = logging.getLogger(__name__)


class Migrator:
    def __init__(self, config: MigrationConfig, source, destination, executor=None):
        self.config = config
        self.source = source
        self.destination = destination
        self._owns_executor = executor is None
        self.executor = executor or create_executor(config.concurrency)

        try:
            self.differ: DiffStrategy = get_strategy(config.diff_strategy, destination, self.executor)
        except Exception:
            if self._owns_executor:
                shutdown_executor(self.executor, wait=False)
            raise

        self.lister = SourceLister(source, self.executor, page_size=config.page_size)
        self.pool = TransferPool(
            source,
            destination,
            self.executor,
            concurrency=config.concurrency,
            download_attempts=config.download_attempts,
            retry_delay=config.retry_delay,
        )
        self.progress = ProgressCounters()

    # ---------------------------------------------------------------------------
    # SCAN + CLASSIFY
    # ---------------------------------------------------------------------------

    async def discover_folders(self) -> List[str]:
        cfg = self.config
        classifier = FolderClassifier(
            root=cfg.gcs_root_prefix,
            policy=cfg.folder_policy,
            marker_filename=cfg.marker_filename,
            cutoff=cfg.minimum_date,
        )

        logger.info("🔗 Getting file list from '%s/%s'...", cfg.gcs_bucket, cfg.gcs_root_prefix)
        if cfg.folder_policy == "date_filtered":
            logger.info("⏳ Searching for folders created after %s", cfg.minimum_date.isoformat())
        else:
            logger.info("⏳ Full migration: every folder under the root will be included")

        # Empty pages can still carry a continuation token
        async for page in self.lister.pages(cfg.gcs_root_prefix):
            if not page.items:
                if classifier.pages_fetched == 0 and page.is_last:
                    logger.info("❌ No files or folders found at the specified path.")
                continue
            recent_in_page = classifier.observe(page.items)
            logger.info(
                "✅ Request #%d. Total files: %d (%d folders). Of which: %d are recent.",
                classifier.pages_fetched,
                classifier.objects_scanned,
                len(classifier.all_folders),
                recent_in_page,
            )

        summary = classifier.summary()
        folders = sorted(summary.recent_folders)
        if not folders:
            logger.info(
                "❌ No new folders were found (%d objects scanned, %d folders total).",
                summary.objects_scanned, len(summary.all_folders),
            )
        else:
            logger.info(
                "✅ Scanning complete. Found %d new unique folders out of %d.",
                len(folders), len(summary.all_folders),
            )
            logger.info("All new unique folders: %s", folders)
        return folders

    # ---------------------------------------------------------------------------
    # DIFF + TRANSFER
    # ---------------------------------------------------------------------------

    async def plan_folder(self, folder: str) -> FolderPlan:
        prefix = folder_prefix(self.config.gcs_root_prefix, folder)
        records = await self.lister.list_records(prefix)
        return await self.differ.plan(folder, prefix, records)

    def _on_file_done(self, result: TransferResult) -> None:
        p = self.progress
        if result.status == "transferred":
            p.files_transferred += 1
            p.total_files_transferred += 1
            logger.info(
                "   ✔️ File transferred (%d/%d): %s",
                p.files_transferred, p.total_files_in_folder, result.key,
            )

    def _report_failures(self, results: List[TransferResult]) -> None:
        for r in results:
            if r.status == "skipped":
                self.progress.files_skipped += 1
                logger.error(
                    "   ❌ CRITICAL: Failed to download file from GCS after %d attempts. Skipping: %s",
                    r.attempts, r.key,
                )
            elif r.status == "failed":
                self.progress.files_failed += 1
                logger.error("   ❌ Upload failed for %s: %s", r.key, r.reason)

    def _folder_done(self) -> None:
        p = self.progress
        p.folders_migrated += 1
        logger.info(
            "✨ Folders migrated: %d/%d (Remaining: %d)",
            p.folders_migrated, p.total_folders, p.folders_remaining,
        )

    async def migrate_folder(self, folder: str) -> List[TransferResult]:
        logger.info("➡️ Starting migration for folder: %s", folder)
        plan = await self.plan_folder(folder)

        if plan.already_migrated:
            logger.info("   ⏭️ Folder already present in R2, skipping (presence check).")
            self._folder_done()
            return []

        logger.info("   ✅ Found %d existing files in R2 for this folder.", plan.existing_count)
        logger.info(
            "   📂 Found %d files in GCS. Migrating %d new files.",
            plan.source_count, len(plan.tasks),
        )
        if not plan.tasks:
            logger.info("   ⚠️ Folder is fully synced, no new files to transfer.")
            self._folder_done()
            return []

        self.progress.files_transferred = 0
        self.progress.total_files_in_folder = len(plan.tasks)

        results = await self.pool.run(plan.tasks, on_result=self._on_file_done)
        self._report_failures(results)

        missing = len(results) - self.progress.files_transferred
        if missing:
            logger.warning(
                "⚠️ Migration for folder '%s' finished with %d of %d files not transferred.",
                folder, missing, len(results),
            )
        else:
            logger.info("✅ Migration for folder '%s' complete. All files are now in sync.", folder)
        self._folder_done()
        return results

    # ---------------------------------------------------------------------------
    # Entry
    # ---------------------------------------------------------------------------

    async def run(self) -> ProgressCounters:
        try:
            folders = await self.discover_folders()
            self.progress.total_folders = len(folders)

            if folders:
                logger.info("--- Starting R2 migration ---")
                for folder in folders:
                    await self.migrate_folder(folder)

            p = self.progress
            logger.info("--- Migration process finished ---")
            logger.info(
                "Folders migrated: %d/%d | Files transferred: %d | Skipped: %d | Failed: %d",
                p.folders_migrated, p.total_folders, p.total_files_transferred, p.files_skipped, p.files_failed,
            )
            return p
        finally:
            if self._owns_executor:
                shutdown_executor(self.executor, wait=True)


async def run_migration(config: MigrationConfig, source=None, destination=None) -> ProgressCounters:
    """Build the real clients (unless given) and run one migration pass."""
    if source is None:
        from services.gcs import GCSSource
        source = GCSSource(config.gcs_bucket, project=config.gcs_project)
    if destination is None:
        from services.storage import R2Destination
        destination = R2Destination.from_config(config)

    migrator = Migrator(config, source, destination)
    return await migrator.run()
