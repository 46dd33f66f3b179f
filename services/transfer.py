"""
TRANSFER WORKER POOL
====================
Copies objects from the source to the destination with at most N transfers
in flight. Each transfer downloads the whole object into memory, then uploads
it under the identical key with the source content type.

Download failures (transport errors, a null buffer, or a buffer whose length
disagrees with the listed size) are retried a fixed number of times with a
fixed delay. After that the object is skipped and the rest of the folder
carries on. Upload failures are not retried.

Every task ends in a TransferResult; nothing is raised to the caller.
"""

import asyncio
import logging
from concurrent.futures import Executor
from typing import Callable, List, Optional

from models import TransferResult, TransferTask
from services.errors import DownloadError, UploadError

logger = logging.getLogger(__name__)

ResultCallback = Callable[[TransferResult], None]


class TransferPool:
    def __init__(
        self,
        source,
        destination,
        executor: Executor,
        concurrency: int = 8,
        download_attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        self.source = source
        self.destination = destination
        self.executor = executor
        self.concurrency = max(1, concurrency)
        self.download_attempts = max(1, download_attempts)
        self.retry_delay = retry_delay

    def _fetch(self, task: TransferTask) -> bytes:
        data = self.source.download_object(task.source_key)
        if data is None:
            raise DownloadError(task.source_key, "Downloaded buffer is null or undefined.")
        if task.expected_size is not None and len(data) != task.expected_size:
            raise DownloadError(
                task.source_key,
                f"Downloaded {len(data)} bytes, expected {task.expected_size}",
            )
        return data

    async def download(self, task: TransferTask) -> tuple[Optional[bytes], int]:
        """Return (data, attempts). data is None when every attempt failed."""
        loop = asyncio.get_running_loop()
        for attempt in range(1, self.download_attempts + 1):
            try:
                data = await loop.run_in_executor(self.executor, self._fetch, task)
                return data, attempt
            except Exception as e:
                logger.warning(
                    "   ⚠️ Download failed for file: %s (Attempt %d/%d): %s",
                    task.source_key, attempt, self.download_attempts, e,
                )
                if attempt < self.download_attempts:
                    await asyncio.sleep(self.retry_delay)
        return None, self.download_attempts

    async def transfer(self, task: TransferTask) -> TransferResult:
        key = task.source_key
        data, attempts = await self.download(task)
        if data is None:
            return TransferResult(
                key=key,
                status="skipped",
                attempts=attempts,
                reason=f"download failed after {attempts} attempts",
            )

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                self.executor, self.destination.put_object, key, data, task.content_type
            )
        except UploadError as e:
            return TransferResult(key=key, status="failed", attempts=attempts, reason=e.reason)
        except Exception as e:
            return TransferResult(key=key, status="failed", attempts=attempts, reason=str(e))
        return TransferResult(key=key, status="transferred", attempts=attempts)

    async def run(self, tasks: List[TransferTask], on_result: Optional[ResultCallback] = None) -> List[TransferResult]:
        """Run every task; returns once all of them reached a terminal state."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def process_with_semaphore(task: TransferTask) -> TransferResult:
            async with semaphore:
                result = await self.transfer(task)
            if on_result is not None:
                on_result(result)
            return result

        outcomes = await asyncio.gather(
            *(process_with_semaphore(t) for t in tasks), return_exceptions=True
        )

        results: List[TransferResult] = []
        for task, outcome in zip(tasks, outcomes):
            if isinstance(outcome, BaseException):
                results.append(
                    TransferResult(key=task.source_key, status="failed", reason=f"unexpected error: {outcome}")
                )
            else:
                results.append(outcome)
        return results
