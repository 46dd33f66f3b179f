"""
Thread pool used to run blocking storage client calls (google-cloud-storage,
boto3) off the event loop. One executor is created per migration run and
sized to the transfer concurrency.
"""

from concurrent.futures import ThreadPoolExecutor


def create_executor(max_workers: int) -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="migrate")


def shutdown_executor(executor: ThreadPoolExecutor | None, wait: bool = True) -> None:
    if executor is not None:
        executor.shutdown(wait=wait)
