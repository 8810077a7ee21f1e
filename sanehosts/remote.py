"""Download remote hosts files and blocklists."""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import ReadTimeoutError
from urllib3.util.retry import Retry

from sanehosts import __version__
from sanehosts.errors import (
    HTTPStatusError,
    IngestCancelledError,
    IngestError,
    IngestTimeoutError,
    InvalidURLError,
    NetworkError,
)
from sanehosts.ingest import DEFAULT_MAX_RECORDS, CancelToken, IngestProgress, ProgressCallback, ingest_lines
from sanehosts.merge import merge
from sanehosts.models import HostEntry, Profile, ProfileSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"sanehosts/{__version__}"
MAX_PARALLEL_FETCHES = 4


@dataclass(frozen=True)
class RemoteHostsFile:
    url: str
    entries: tuple[HostEntry, ...]
    fetched_at: datetime
    truncated: bool = False
    etag: str | None = None
    last_modified: str | None = None

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    def to_profile(self, name: str) -> Profile:
        return Profile(
            name=name,
            entries=self.entries,
            source=ProfileSource.remote(self.url, self.fetched_at),
            color_tag="blue",
        )


@dataclass(frozen=True)
class FetchOutcome:
    url: str
    file: RemoteHostsFile | None = None
    error: IngestError | None = None

    @property
    def ok(self) -> bool:
        return self.file is not None


def create_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """HTTP session that retries transient failures and rate limiting."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    retry = Retry(
        total=3,
        backoff_factor=0.3,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET", "HEAD"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _check_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(url)


@contextmanager
def _translate_errors(url: str) -> Iterator[None]:
    try:
        yield
    except requests.exceptions.Timeout as exc:
        raise IngestTimeoutError() from exc
    except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as exc:
        raise InvalidURLError(url) from exc
    except requests.exceptions.ConnectionError as exc:
        # read timeouts while streaming the body arrive wrapped in ConnectionError
        if exc.args and isinstance(exc.args[0], ReadTimeoutError):
            raise IngestTimeoutError() from exc
        raise NetworkError(str(exc)) from exc
    except requests.exceptions.RequestException as exc:
        raise NetworkError(str(exc)) from exc


@contextmanager
def _session_for(session: requests.Session | None) -> Iterator[requests.Session]:
    if session is not None:
        yield session
        return
    own = create_session()
    try:
        yield own
    finally:
        own.close()


def fetch(
    url: str,
    session: requests.Session | None = None,
    max_records: int = DEFAULT_MAX_RECORDS,
    timeout: float = DEFAULT_TIMEOUT,
    cancel: CancelToken | None = None,
    on_progress: ProgressCallback | None = None,
) -> RemoteHostsFile:
    """Stream ``url`` through the ingestor; the body is never held in memory."""
    _check_url(url)
    logger.info("fetching %s", url)

    with _session_for(session) as http, _translate_errors(url):
        with http.get(url, stream=True, timeout=timeout) as response:
            if not 200 <= response.status_code < 300:
                logger.warning("HTTP %d for %s", response.status_code, url)
                raise HTTPStatusError(response.status_code, url)
            if response.encoding is None:
                response.encoding = "utf-8"
            result = ingest_lines(
                response.iter_lines(decode_unicode=True),
                max_records=max_records,
                cancel=cancel,
                on_progress=on_progress,
            )
            etag = response.headers.get("ETag")
            last_modified = response.headers.get("Last-Modified")

    return RemoteHostsFile(
        url=url,
        entries=result.entries,
        fetched_at=datetime.now(timezone.utc),
        truncated=result.truncated,
        etag=etag,
        last_modified=last_modified,
    )


class _CombinedProgress:
    """Sums the latest progress of each parallel download into one snapshot."""

    def __init__(self, count: int, on_progress: ProgressCallback) -> None:
        self._latest = [IngestProgress()] * count
        self._on_progress = on_progress
        self._lock = threading.Lock()

    def reporter(self, index: int) -> ProgressCallback:
        return functools.partial(self._update, index)

    def _update(self, index: int, progress: IngestProgress) -> None:
        with self._lock:
            self._latest[index] = progress
            self._on_progress(
                IngestProgress(
                    lines_processed=sum(p.lines_processed for p in self._latest),
                    entries_accepted=sum(p.entries_accepted for p in self._latest),
                )
            )


def _fetch_outcome(url: str, **kwargs) -> FetchOutcome:
    try:
        return FetchOutcome(url, file=fetch(url, **kwargs))
    except IngestCancelledError:
        raise
    except IngestError as exc:
        logger.warning("failed to fetch %s: %s", url, exc)
        return FetchOutcome(url, error=exc)


def fetch_all(
    urls: list[str],
    max_records: int = DEFAULT_MAX_RECORDS,
    timeout: float = DEFAULT_TIMEOUT,
    cancel: CancelToken | None = None,
    max_workers: int = MAX_PARALLEL_FETCHES,
    on_progress: ProgressCallback | None = None,
) -> list[FetchOutcome]:
    """Fetch several sources in parallel.

    Outcomes come back in the order of ``urls`` regardless of which download
    finished first, so merging them is deterministic. ``on_progress`` receives
    the totals across all downloads.
    """
    if not urls:
        return []
    combined = _CombinedProgress(len(urls), on_progress) if on_progress is not None else None
    with ThreadPoolExecutor(max_workers=min(max_workers, len(urls)), thread_name_prefix="sanehosts-fetch") as pool:
        futures = [
            pool.submit(
                _fetch_outcome,
                url,
                max_records=max_records,
                timeout=timeout,
                cancel=cancel,
                on_progress=combined.reporter(i) if combined is not None else None,
            )
            for i, url in enumerate(urls)
        ]
        return [f.result() for f in futures]


def merge_fetched(outcomes: list[FetchOutcome]) -> list[HostEntry]:
    return merge(o.file.entries for o in outcomes if o.file is not None)


def check_for_updates(
    url: str,
    etag: str | None = None,
    last_modified: str | None = None,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> bool:
    """Conditional HEAD request; False when the server answers 304 Not Modified."""
    _check_url(url)
    headers = {}
    if etag:
        headers["If-None-Match"] = etag
    if last_modified:
        headers["If-Modified-Since"] = last_modified

    with _session_for(session) as http, _translate_errors(url):
        response = http.head(url, headers=headers, timeout=timeout, allow_redirects=True)
    if response.status_code == 304:
        return False
    if not 200 <= response.status_code < 300:
        raise HTTPStatusError(response.status_code, url)
    return True
