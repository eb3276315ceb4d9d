"""
Downloads remote resources (e.g. definition lists) to deterministic local paths.
"""

import asyncio
import hashlib
import logging
import os
import tempfile
import weakref
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import aiofiles
import aiohttp

from ircwatch.exceptions import (
    BadStatusError,
    FetchError,
    LocalIOError,
    UnreachableError,
)
from ircwatch.models.config import StoreConfig

log = logging.getLogger(__name__)

CHUNK_SIZE = 131072  # 128 KB


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently a fetch is retried. One attempt means no retry."""

    max_attempts: int = 1
    base_delay: float = 1.5

    def should_retry(self, error: FetchError, attempt: int) -> bool:
        if attempt >= self.max_attempts:
            return False
        if isinstance(error, UnreachableError):
            return True
        if isinstance(error, BadStatusError):
            return error.status == 429 or error.status >= 500
        return False

    def delay(self, attempt: int) -> float:
        return self.base_delay * (2 ** (attempt - 1))


@dataclass(frozen=True)
class FetchedFile:
    """
    A successfully downloaded resource. The caller owns the file on disk and is
    responsible for removing it once done.
    """

    url: str
    path: Path
    size: int

    def open(self) -> BinaryIO:
        return open(self.path, "rb")  # noqa: SIM115

    def remove(self) -> None:
        self.path.unlink(missing_ok=True)


class ResourceFetcher:
    """
    Fetches a URL into ``destination_dir`` under the hex MD5 digest of the URL.

    Every call downloads again; the stable name only makes the location
    predictable. Failed or cancelled downloads never leave a file behind.
    Concurrent fetches of the same URL are serialized, so each caller receives
    a complete file.
    """

    def __init__(
        self,
        destination_dir: Path,
        timeout: float = 10.0,
        retry: RetryPolicy | None = None,
    ):
        self.destination_dir = Path(destination_dir)
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self._session: aiohttp.ClientSession | None = None
        self._locks: weakref.WeakValueDictionary[Path, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @classmethod
    def from_config(cls, config: StoreConfig) -> "ResourceFetcher":
        return cls(
            Path(config.fetch_dir),
            timeout=config.fetch_timeout,
            retry=RetryPolicy(
                max_attempts=config.fetch_max_attempts,
                base_delay=config.fetch_base_delay,
            ),
        )

    async def __aenter__(self) -> "ResourceFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    def _get_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            log.debug("Fetcher session closed.")

    def destination_for(self, url: str) -> Path:
        """The local path a URL is always downloaded to."""
        hashed_url = hashlib.md5(url.encode("utf-8")).hexdigest()  # noqa: S324
        return self.destination_dir / hashed_url

    async def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        retry: RetryPolicy | None = None,
    ) -> FetchedFile | None:
        """
        Downloads ``url`` to its deterministic destination.

        An empty URL is treated as "nothing to fetch" and returns None.

        Raises:
            UnreachableError: If the request could not be completed or timed out.
            BadStatusError: If the response status is not 2xx.
            LocalIOError: If the destination cannot be created or written.
        """
        if not url:
            log.debug("Empty URL given, nothing to fetch.")
            return None

        destination = self.destination_for(url)
        lock = self._locks.get(destination)
        if lock is None:
            lock = self._locks[destination] = asyncio.Lock()

        async with lock:
            return await self._fetch_locked(
                url, destination, headers, retry or self.retry
            )

    async def _fetch_locked(
        self,
        url: str,
        destination: Path,
        headers: dict[str, str] | None,
        policy: RetryPolicy,
    ) -> FetchedFile:
        try:
            await asyncio.to_thread(self._prepare_destination, destination)
        except OSError as e:
            log.error(f"Could not prepare destination '{destination}': {e}")
            raise LocalIOError(f"Could not prepare destination: {e}", url) from e

        attempt = 1
        while True:
            try:
                size = await self._download(url, destination, headers)
                break
            except FetchError as e:
                if not policy.should_retry(e, attempt):
                    log.error(f"Failed to fetch '{url}': {e}")
                    raise
                delay = policy.delay(attempt)
                log.debug(
                    f"Fetch attempt {attempt}/{policy.max_attempts} for '{url}' failed:"
                    f" {e}. Retrying in {delay:.1f}s..."
                )
                attempt += 1
                await asyncio.sleep(delay)

        log.debug(f"Successfully downloaded '{url}' to '{destination}' ({size} bytes).")
        return FetchedFile(url=url, path=destination, size=size)

    def _prepare_destination(self, destination: Path) -> None:
        """Creates the destination directory and invalidates any previous download."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.unlink(missing_ok=True)

    async def _download(
        self, url: str, destination: Path, headers: dict[str, str] | None
    ) -> int:
        """Performs a single download attempt, leaving no file behind on failure."""
        partial_path: Path | None = None
        completed = False
        try:
            partial_path = await asyncio.to_thread(self._new_partial_path, destination)
            session = self._get_session()
            async with session.get(url, headers=headers, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise BadStatusError(url, response.status)

                bytes_written = 0
                async with aiofiles.open(partial_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        await f.write(chunk)
                        bytes_written += len(chunk)

            await asyncio.to_thread(os.replace, partial_path, destination)
            completed = True
            return bytes_written
        except FetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UnreachableError(f"Request to '{url}' failed: {e}", url) from e
        except OSError as e:
            raise LocalIOError(f"Could not write '{destination}': {e}", url) from e
        finally:
            if not completed and partial_path is not None:
                partial_path.unlink(missing_ok=True)

    @staticmethod
    def _new_partial_path(destination: Path) -> Path:
        """Reserves a unique temporary file next to the destination."""
        fd, name = tempfile.mkstemp(
            dir=destination.parent, prefix=destination.name + ".", suffix=".part"
        )
        os.close(fd)
        return Path(name)
