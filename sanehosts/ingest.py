"""Streaming ingestion of large, untrusted hosts-format sources.

The ingestor reads its input one line at a time and never keeps the raw text.
It accepts a relaxed grammar: regular ``ip host...`` lines plus the bare
``domain`` lines used by many blocklists, which are null-routed to
``0.0.0.0``. Every ``CHECK_INTERVAL`` lines it checks for cancellation and
reports progress.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import IO, Any

from sanehosts.errors import IngestCancelledError, NoValidEntriesError
from sanehosts.models import HostEntry
from sanehosts.validate import is_valid_hostname, is_valid_ip

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 100_000
CHECK_INTERVAL = 1000
NULL_ROUTE_IP = "0.0.0.0"

# Names a remote list must never redefine.
RESERVED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "local", "broadcasthost"})


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a worker."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise IngestCancelledError()


@dataclass(frozen=True)
class IngestProgress:
    lines_processed: int = 0
    entries_accepted: int = 0


@dataclass(frozen=True)
class IngestResult:
    entries: tuple[HostEntry, ...]
    truncated: bool
    lines_processed: int

    @property
    def count(self) -> int:
        return len(self.entries)


ProgressCallback = Callable[[IngestProgress], None]


def parse_relaxed_line(line: str, line_number: int) -> HostEntry | None:
    """Parse one blocklist line, or return None if it yields no entry."""
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    text = text.split("#", 1)[0]
    tokens = text.split()
    if not tokens:
        return None

    if len(tokens) == 1:
        domain = tokens[0]
        if "." not in domain or is_valid_ip(domain) or not is_valid_hostname(domain):
            return None
        ip_address = NULL_ROUTE_IP
        candidates = [domain]
    else:
        ip_address = tokens[0]
        if not is_valid_ip(ip_address):
            return None
        candidates = [t for t in tokens[1:] if is_valid_hostname(t) and not is_valid_ip(t)]

    hostnames = [h for h in candidates if h.lower() not in RESERVED_HOSTNAMES]
    if not hostnames:
        return None
    return HostEntry(ip_address=ip_address, hostnames=tuple(hostnames), line_number=line_number)


def ingest_lines(
    lines: Iterable[str | bytes],
    max_records: int = DEFAULT_MAX_RECORDS,
    cancel: CancelToken | None = None,
    on_progress: ProgressCallback | None = None,
) -> IngestResult:
    """Consume ``lines`` lazily and collect at most ``max_records`` entries.

    Hitting the cap is not an error: the result comes back with
    ``truncated=True``. Cancellation raises :class:`IngestCancelledError` and an
    input with no usable line raises :class:`NoValidEntriesError`.
    """
    if max_records < 1:
        raise ValueError("max_records must be positive")
    if cancel is not None:
        cancel.raise_if_cancelled()

    entries: list[HostEntry] = []
    truncated = False
    processed = 0

    for raw in lines:
        processed += 1
        if processed % CHECK_INTERVAL == 0:
            if cancel is not None:
                cancel.raise_if_cancelled()
            if on_progress is not None:
                on_progress(IngestProgress(processed, len(entries)))

        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        entry = parse_relaxed_line(raw, processed)
        if entry is None:
            continue
        if len(entries) >= max_records:
            truncated = True
            break
        entries.append(entry)

    if cancel is not None:
        cancel.raise_if_cancelled()
    if on_progress is not None:
        on_progress(IngestProgress(processed, len(entries)))

    if not entries:
        raise NoValidEntriesError()
    if truncated:
        logger.info("stopped at the %d record limit after %d lines", max_records, processed)
    else:
        logger.info("ingested %d entries from %d lines", len(entries), processed)
    return IngestResult(entries=tuple(entries), truncated=truncated, lines_processed=processed)


def ingest_stream(
    source: IO[Any],
    max_records: int = DEFAULT_MAX_RECORDS,
    cancel: CancelToken | None = None,
    on_progress: ProgressCallback | None = None,
) -> IngestResult:
    """Ingest from an open text or binary file object, line by line."""
    return ingest_lines(source, max_records=max_records, cancel=cancel, on_progress=on_progress)


class IngestJob:
    """Run an ingestion task on a worker thread.

    ``task`` is called as ``task(cancel=..., on_progress=...)`` and its return
    value becomes the job's result. Progress is readable from any thread.
    """

    def __init__(self, task: Callable[..., Any], executor: Executor | None = None) -> None:
        self._token = CancelToken()
        self._lock = threading.Lock()
        self._progress = IngestProgress()

        owns_executor = executor is None
        if executor is None:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sanehosts-ingest")
        self._future: Future = executor.submit(task, cancel=self._token, on_progress=self._record)
        if owns_executor:
            executor.shutdown(wait=False)

    @classmethod
    def for_stream(cls, source: IO[Any], max_records: int = DEFAULT_MAX_RECORDS) -> IngestJob:
        return cls(functools.partial(ingest_stream, source, max_records))

    def _record(self, progress: IngestProgress) -> None:
        with self._lock:
            if progress.lines_processed >= self._progress.lines_processed:
                self._progress = progress

    @property
    def progress(self) -> IngestProgress:
        with self._lock:
            return self._progress

    def cancel(self) -> None:
        self._token.cancel()

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> Any:
        return self._future.result(timeout)
