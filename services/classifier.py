"""
FOLDER CLASSIFIER
=================
Groups flat object keys into folders (the path segment right before the
file name) and decides which folders should be migrated.

Policies:
    date_filtered — a folder is recent when its marker file was created on or
                    after the cutoff (inclusive).
    full          — every folder that has at least one object is included.

No I/O happens here; records are fed in page by page from the lister.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional, Set

from models import ObjectRecord, ScanSummary
from utils import normalize_prefix, split_key


class FolderClassifier:
    def __init__(
        self,
        root: str = "",
        policy: str = "date_filtered",
        marker_filename: Optional[str] = None,
        cutoff: Optional[datetime] = None,
    ):
        if policy not in ("date_filtered", "full"):
            raise ValueError(f"Unknown folder policy: {policy}")
        if policy == "date_filtered" and (not marker_filename or cutoff is None):
            raise ValueError("date_filtered policy needs a marker filename and a cutoff")
        if cutoff is not None and cutoff.tzinfo is None:
            cutoff = cutoff.replace(tzinfo=timezone.utc)

        self.root = normalize_prefix(root)
        self.policy = policy
        self.marker_filename = marker_filename
        self.cutoff = cutoff

        self.recent: Set[str] = set()
        self.all_folders: Set[str] = set()
        self.objects_scanned = 0
        self.pages_fetched = 0

    def is_recent_marker(self, rec: ObjectRecord, leaf: str) -> bool:
        return leaf == self.marker_filename and rec.created_at >= self.cutoff

    def observe(self, records: Iterable[ObjectRecord]) -> int:
        """Classify one page of records. Returns how many of them marked a folder as recent."""
        recent_in_page = 0
        self.pages_fetched += 1
        for rec in records:
            self.objects_scanned += 1
            folder, leaf = split_key(rec.key, self.root)
            # Directory placeholders and objects directly under root have no folder
            if not folder or not leaf:
                continue
            self.all_folders.add(folder)

            if self.policy == "full":
                if folder not in self.recent:
                    recent_in_page += 1
                self.recent.add(folder)
            elif self.is_recent_marker(rec, leaf):
                recent_in_page += 1
                self.recent.add(folder)
        return recent_in_page

    def summary(self) -> ScanSummary:
        return ScanSummary(
            recent_folders=set(self.recent),
            all_folders=set(self.all_folders),
            objects_scanned=self.objects_scanned,
            pages_fetched=self.pages_fetched,
        )
