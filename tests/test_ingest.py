import io
import threading

import pytest

from sanehosts.errors import IngestCancelledError, NoValidEntriesError
from sanehosts.ingest import (
    CHECK_INTERVAL,
    NULL_ROUTE_IP,
    CancelToken,
    IngestJob,
    ingest_lines,
    ingest_stream,
    parse_relaxed_line,
)


def _blocklist(count: int):
    for i in range(count):
        yield f"0.0.0.0 host{i}.example.com"


def test_standard_line():
    entry = parse_relaxed_line("127.0.0.1 a.test b.test", 1)
    assert entry.ip_address == "127.0.0.1"
    assert entry.hostnames == ("a.test", "b.test")


def test_domain_only_line_is_null_routed():
    entry = parse_relaxed_line("  ads.example.com  ", 1)
    assert entry.ip_address == NULL_ROUTE_IP
    assert entry.hostnames == ("ads.example.com",)


def test_single_label_domain_is_rejected():
    assert parse_relaxed_line("intranet", 1) is None


def test_bare_ip_is_not_a_domain():
    assert parse_relaxed_line("1.2.3.4", 1) is None
    assert parse_relaxed_line("0.0.0.0", 1) is None


def test_inline_comment_is_stripped():
    entry = parse_relaxed_line("0.0.0.0 ads.test # tracking", 1)
    assert entry.hostnames == ("ads.test",)


def test_reserved_names_are_dropped():
    assert parse_relaxed_line("127.0.0.1 localhost", 1) is None
    assert parse_relaxed_line("0.0.0.0 0.0.0.0", 1) is None
    entry = parse_relaxed_line("127.0.0.1 localhost localhost.localdomain evil.test", 1)
    assert entry.hostnames == ("evil.test",)


def test_skips_noise():
    assert parse_relaxed_line("", 1) is None
    assert parse_relaxed_line("# comment", 1) is None
    assert parse_relaxed_line("999.0.0.1 a.test", 1) is None


def test_ingest_mixed_lines():
    lines = ["# header", "", "0.0.0.0 ads.test", "tracker.test", "garbage", "::1 six.test"]
    result = ingest_lines(lines)
    assert [e.primary_hostname for e in result.entries] == ["ads.test", "tracker.test", "six.test"]
    assert not result.truncated
    assert result.lines_processed == len(lines)
    assert result.count == 3


def test_cap_truncates_large_input():
    result = ingest_lines(_blocklist(150_000), max_records=100_000)
    assert result.count == 100_000
    assert result.truncated
    assert result.entries[-1].primary_hostname == "host99999.example.com"


def test_exactly_at_cap_is_not_truncated():
    result = ingest_lines(_blocklist(10), max_records=10)
    assert result.count == 10
    assert not result.truncated


def test_trailing_noise_after_cap_is_not_truncation():
    lines = list(_blocklist(5)) + ["# trailer", "", "not-a-domain"]
    result = ingest_lines(lines, max_records=5)
    assert not result.truncated


def test_invalid_cap():
    with pytest.raises(ValueError):
        ingest_lines(["a.test"], max_records=0)


def test_no_valid_entries():
    with pytest.raises(NoValidEntriesError):
        ingest_lines(["# nothing", "", "just words here"])


def test_cancel_before_start():
    token = CancelToken()
    token.cancel()
    with pytest.raises(IngestCancelledError):
        ingest_lines(_blocklist(10), cancel=token)


def test_cancel_mid_stream():
    token = CancelToken()
    consumed = 0

    def lines():
        nonlocal consumed
        for line in _blocklist(50_000):
            consumed += 1
            if consumed == 2500:
                token.cancel()
            yield line

    with pytest.raises(IngestCancelledError):
        ingest_lines(lines(), cancel=token)
    assert consumed <= 2500 + CHECK_INTERVAL


def test_progress_is_reported_and_monotonic():
    snapshots = []
    ingest_lines(_blocklist(5500), on_progress=snapshots.append)

    assert len(snapshots) == 5500 // CHECK_INTERVAL + 1
    processed = [s.lines_processed for s in snapshots]
    assert processed == sorted(processed)
    assert snapshots[-1].lines_processed == 5500
    assert snapshots[-1].entries_accepted == 5500


def test_ingest_binary_stream():
    data = b"0.0.0.0 ads.test\n# c\nbad\xffhost.test\ntracker.test\n"
    result = ingest_stream(io.BytesIO(data))
    assert [e.primary_hostname for e in result.entries] == ["ads.test", "tracker.test"]


def test_ingest_text_stream():
    result = ingest_stream(io.StringIO("0.0.0.0 ads.test\r\n"))
    assert result.entries[0].hostnames == ("ads.test",)


def test_job_runs_in_background():
    job = IngestJob.for_stream(io.StringIO("0.0.0.0 a.test\n0.0.0.0 b.test\n"))
    result = job.result(timeout=5)
    assert result.count == 2
    assert job.done()
    assert job.progress.entries_accepted == 2


def test_job_cancel():
    started = threading.Event()
    release = threading.Event()

    def task(cancel, on_progress):
        started.set()
        release.wait(5)
        cancel.raise_if_cancelled()
        return "finished"

    job = IngestJob(task)
    assert started.wait(5)
    job.cancel()
    release.set()

    assert job.cancelled
    with pytest.raises(IngestCancelledError):
        job.result(timeout=5)
