"""
DESTINATION DIFFER
==================
Decides which source objects of a folder still need to be copied.

Both strategies share the same capability (list existing destination keys
under a prefix) and only differ in how they turn that listing into a plan:

    FullDiffStrategy       — pages through every destination key and plans
                             source_keys - destination_keys. Safe to re-run
                             after a partial failure. Default.
    PresenceCheckStrategy  — LEGACY. Lists a single key; if anything exists the
                             whole folder is considered migrated. A folder that
                             was interrupted mid-transfer is never resumed.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import List, Optional, Set

from models import FolderPlan, ObjectRecord, Page, TransferTask

logger = logging.getLogger(__name__)


class DiffStrategy(ABC):
    name = "base"

    def __init__(self, destination, executor: Executor):
        self.destination = destination
        self.executor = executor

    async def _list_page(self, prefix: str, max_keys: Optional[int] = None, token: Optional[str] = None) -> Page[str]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor, self.destination.list_objects, prefix, max_keys, token
        )

    async def existing_keys(self, prefix: str) -> Set[str]:
        keys: Set[str] = set()
        token = None
        while True:
            page = await self._list_page(prefix, token=token)
            keys.update(page.items)
            if page.is_last:
                break
            token = page.next_token
        return keys

    @abstractmethod
    async def plan(self, folder: str, prefix: str, records: List[ObjectRecord]) -> FolderPlan:
        """Return the transfer plan for one folder."""


class FullDiffStrategy(DiffStrategy):
    name = "full_diff"

    async def plan(self, folder: str, prefix: str, records: List[ObjectRecord]) -> FolderPlan:
        existing = await self.existing_keys(prefix)
        tasks = [TransferTask.from_record(r) for r in records if r.key not in existing]
        return FolderPlan(
            folder=folder,
            prefix=prefix,
            source_count=len(records),
            existing_count=len(existing),
            tasks=tasks,
        )


class PresenceCheckStrategy(DiffStrategy):
    name = "presence_check"

    async def plan(self, folder: str, prefix: str, records: List[ObjectRecord]) -> FolderPlan:
        page = await self._list_page(prefix, max_keys=1)
        if page.items:
            return FolderPlan(
                folder=folder,
                prefix=prefix,
                source_count=len(records),
                existing_count=len(page.items),
                already_migrated=True,
            )
        return FolderPlan(
            folder=folder,
            prefix=prefix,
            source_count=len(records),
            tasks=[TransferTask.from_record(r) for r in records],
        )


STRATEGIES = {
    FullDiffStrategy.name: FullDiffStrategy,
    PresenceCheckStrategy.name: PresenceCheckStrategy,
}


def get_strategy(name: str, destination, executor: Executor) -> DiffStrategy:
    try:
        cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown diff strategy: {name}") from None
    if cls is PresenceCheckStrategy:
        logger.warning(
            "⚠️ Using legacy presence_check strategy: any existing object marks a folder as migrated, "
            "so folders interrupted by an earlier failed run will NOT be resumed. Use full_diff to resume safely."
        )
    return cls(destination, executor)
