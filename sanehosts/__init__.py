"""SaneHosts: hosts file profiles: parse, merge, ingest and generate."""

from __future__ import annotations

__version__ = "0.3.0"

from sanehosts.generator import generate, generate_merged, render_entry
from sanehosts.ingest import CancelToken, IngestResult, ingest_lines, ingest_stream
from sanehosts.merge import merge
from sanehosts.models import Blank, HostComment, HostEntry, Profile, ProfileSource
from sanehosts.parser import classify_line, parse, system_entries, user_entries
from sanehosts.validate import is_valid_hostname, is_valid_ip

__all__ = [
    "Blank",
    "CancelToken",
    "HostComment",
    "HostEntry",
    "IngestResult",
    "Profile",
    "ProfileSource",
    "classify_line",
    "generate",
    "generate_merged",
    "ingest_lines",
    "ingest_stream",
    "is_valid_hostname",
    "is_valid_ip",
    "merge",
    "parse",
    "render_entry",
    "system_entries",
    "user_entries",
]
