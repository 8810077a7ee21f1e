"""Hosts file parsing: line classification and system/user partitioning."""

from __future__ import annotations

import logging
import re

from sanehosts.models import Blank, HostComment, HostEntry, HostsLine
from sanehosts.validate import is_valid_hostname, is_valid_ip, looks_like_ip

logger = logging.getLogger(__name__)

INVALID_MARKER = "INVALID: "

_newline_re = re.compile(r"\r\n|\r|\n")


def _parse_entry(text: str, line_number: int, is_enabled: bool) -> HostEntry | None:
    """Parse ``ip host [host...] [# comment]``; None if it is not a valid entry."""
    comment: str | None = None
    if "#" in text:
        text, _, tail = text.partition("#")
        comment = tail.strip() or None
        text = text.strip()

    parts = text.split()
    if len(parts) < 2:
        return None

    ip_address, candidates = parts[0], parts[1:]
    if not is_valid_ip(ip_address):
        return None

    hostnames = [h for h in candidates if is_valid_hostname(h)]
    if not hostnames:
        return None

    return HostEntry(
        ip_address=ip_address,
        hostnames=tuple(hostnames),
        comment=comment,
        is_enabled=is_enabled,
        line_number=line_number,
    )


def classify_line(raw: str, line_number: int) -> HostsLine:
    """Turn one raw line into an entry, a comment or a blank.

    A ``#`` line whose remainder starts like an IP address is tried as a
    disabled entry first. Lines that are neither blank, comments nor valid
    entries are kept as comments tagged ``INVALID:`` so nothing is dropped.
    """
    trimmed = raw.strip()
    if not trimmed:
        return Blank(line_number)

    if trimmed.startswith("#"):
        remainder = trimmed[1:].strip()
        first_token = remainder.split(None, 1)[0] if remainder else ""
        if looks_like_ip(first_token):
            entry = _parse_entry(remainder, line_number, is_enabled=False)
            if entry is not None:
                return entry
        return HostComment(remainder, line_number)

    entry = _parse_entry(trimmed, line_number, is_enabled=True)
    if entry is not None:
        return entry

    logger.debug("line %d is not a valid hosts entry: %r", line_number, raw)
    return HostComment(f"{INVALID_MARKER}{trimmed}", line_number, is_invalid=True)


def parse(content: str) -> list[HostsLine]:
    """Parse hosts file text into typed lines, numbered from 1.

    Any newline convention is accepted. A trailing newline yields a final
    ``Blank``, so generating the result gives back the same line structure.
    """
    if not content:
        return []
    return [classify_line(raw, number) for number, raw in enumerate(_newline_re.split(content), 1)]


def extract_entries(lines: list[HostsLine]) -> list[HostEntry]:
    return [line for line in lines if isinstance(line, HostEntry)]


def invalid_lines(lines: list[HostsLine]) -> list[HostComment]:
    """Lines that failed validation, for callers that want to report them."""
    return [line for line in lines if isinstance(line, HostComment) and line.is_invalid]


def system_entries(entries: list[HostEntry]) -> list[HostEntry]:
    return [e for e in entries if e.is_system_entry]


def user_entries(entries: list[HostEntry]) -> list[HostEntry]:
    return [e for e in entries if not e.is_system_entry]
