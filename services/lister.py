import asyncio
import logging
from concurrent.futures import Executor
from typing import AsyncIterator, List, Optional

from models import ObjectRecord, Page

logger = logging.getLogger(__name__)


class SourceLister:
    """Walks a paginated source listing one page (one request) at a time."""

    def __init__(self, source, executor: Executor, page_size: int = 1000):
        self.source = source
        self.executor = executor
        self.page_size = page_size

    async def fetch_page(self, prefix: str, token: Optional[str] = None) -> Page[ObjectRecord]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor, self.source.list_objects, prefix, self.page_size, token
        )

    async def pages(self, prefix: str, start_token: Optional[str] = None) -> AsyncIterator[Page[ObjectRecord]]:
        """Yield pages until the backend stops returning a continuation token."""
        token = start_token
        while True:
            page = await self.fetch_page(prefix, token)
            yield page
            if page.is_last:
                break
            token = page.next_token

    async def list_records(self, prefix: str) -> List[ObjectRecord]:
        records: List[ObjectRecord] = []
        async for page in self.pages(prefix):
            records.extend(page.items)
        return records
