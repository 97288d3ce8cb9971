"""Streaming file downloads (async-only).

File-level resumability: a file that already exists at the destination is
treated as downloaded. Bodies are streamed into ``<name>.part`` and only
renamed into place once complete, so an interrupted download never leaves
a file that passes the existence check.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Union

import httpx
from tqdm import tqdm

if TYPE_CHECKING:
    from axer.http.client import RequestClient

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"


def partial_path(dest_path: Path) -> Path:
    """Return the temporary path a download is streamed into."""
    return dest_path.with_name(dest_path.name + PARTIAL_SUFFIX)


async def stream_to_file(
    client: httpx.AsyncClient,
    url: str,
    dest_path: Path,
    follow_redirects: bool = True,
    log: Optional[logging.Logger] = None,
) -> Path:
    """Stream a GET response body into dest_path.

    Args:
        client: httpx.AsyncClient instance
        url: URL to download from
        dest_path: Destination file path
        follow_redirects: Whether httpx should follow redirects
        log: Logger for lifecycle messages (defaults to module logger)

    Returns:
        Path to downloaded file

    Raises:
        httpx.HTTPStatusError: If the server answers with a non-2xx status
        httpx.HTTPError: On connection or stream errors
    """
    log = log or logger
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = partial_path(dest_path)

    try:
        async with client.stream("GET", url, follow_redirects=follow_redirects) as response:
            log.info(f"Status: {response.status_code}")
            log.info(f"Content-Type: {response.headers.get('content-type')}")
            log.info(f"Content-Length: {response.headers.get('content-length')}")
            response.raise_for_status()

            with open(tmp_path, 'wb') as f:
                async for chunk in response.aiter_bytes():
                    f.write(chunk)

        os.replace(tmp_path, dest_path)
    except BaseException as e:
        log.error(f"Download failed: {e}")
        tmp_path.unlink(missing_ok=True)
        raise

    log.info("Download success")
    return dest_path


@dataclass
class DownloadTask:
    """A single download task with URL and destination."""

    url: str
    save_path: Path

    def __post_init__(self):
        """Ensure save_path is a Path object."""
        if isinstance(self.save_path, str):
            self.save_path = Path(self.save_path)


class DownloadManager:
    """Runs queued downloads concurrently through one RequestClient.

    Features:
    - File-level resumability (existing files are skipped by the client)
    - Concurrency bounded by asyncio.Semaphore
    - Progress tracking with tqdm
    """

    def __init__(
        self,
        client: "RequestClient",
        max_workers: int = 4,
        show_progress: bool = True,
    ):
        """Initialize download manager.

        Args:
            client: RequestClient used for every download
            max_workers: Maximum number of concurrent downloads
            show_progress: Whether to show progress bar
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.client = client
        self.max_workers = max_workers
        self.show_progress = show_progress
        self.tasks: List[DownloadTask] = []

    def add_task(self, url: str, save_path: Union[str, Path]) -> DownloadTask:
        """Queue a download of url to save_path."""
        task = DownloadTask(url, save_path)
        self.tasks.append(task)
        return task

    def add_tasks(self, tasks: List[DownloadTask]):
        """Queue several download tasks."""
        self.tasks.extend(tasks)

    async def execute(
        self,
        callback: Optional[Callable[[DownloadTask, bool], None]] = None
    ) -> int:
        """Execute all queued download tasks concurrently.

        Args:
            callback: Optional callback called after each task completes
                     with signature: callback(task, success)

        Returns:
            Number of successfully downloaded files
        """
        if not self.tasks:
            logger.warning("No tasks to execute")
            return 0

        tasks = self.tasks
        self.tasks = []
        semaphore = asyncio.Semaphore(self.max_workers)
        successful = 0
        failed = 0

        pbar = None
        if self.show_progress:
            pbar = tqdm(total=len(tasks), desc="Downloading", unit="file")

        async def run(task: DownloadTask):
            async with semaphore:
                return task, await self._download_single(task)

        try:
            for coro in asyncio.as_completed([run(task) for task in tasks]):
                task, success = await coro
                if success:
                    successful += 1
                else:
                    failed += 1

                if callback:
                    callback(task, success)

                if pbar:
                    pbar.update(1)
                    pbar.set_postfix({"success": successful, "failed": failed})
        finally:
            if pbar:
                pbar.close()

        logger.info(f"Download complete: {successful} successful, {failed} failed")
        return successful

    async def _download_single(self, task: DownloadTask) -> bool:
        try:
            await self.client.download(task.url, task.save_path)
        except Exception as e:
            logger.error(f"Failed to download {task.url}: {e}")
            return False
        return True

    def clear(self):
        """Clear all queued tasks."""
        self.tasks = []

    def __len__(self):
        """Return number of queued tasks."""
        return len(self.tasks)
