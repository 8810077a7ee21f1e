"""Render typed lines and profiles back into hosts file text."""

from __future__ import annotations

from datetime import datetime

from sanehosts.models import HostEntry, HostsLine

APP_NAME = "SaneHosts"

BANNER = [
    "##",
    "# Host Database",
    "#",
    "# localhost is used to configure the loopback interface",
    "# when the system is booting.  Do not change this entry.",
    "##",
]

PROFILE_END_MARKER = "# ---- End Profile ----"


def render_entry(entry: HostEntry) -> str:
    return entry.hosts_line


def generate(lines: list[HostsLine]) -> str:
    """Echo a parsed line sequence, one line per element."""
    return "\n".join(line.hosts_line for line in lines)


def profile_start_marker(profile_name: str) -> str:
    return f"# ---- Profile: {profile_name} ----"


def generate_merged(
    system: list[HostEntry],
    profile_name: str,
    profile_entries: list[HostEntry],
    modified_at: datetime | None = None,
) -> str:
    """Build the full hosts file for an active profile.

    Layout: banner, system entries, profile section. Profile entries that are
    themselves system entries are left out of the profile section since the
    system block already carries them. Output is byte-for-byte deterministic
    unless ``modified_at`` is given, in which case it is stamped in the banner.
    """
    lines = list(BANNER)
    lines.append(f"# Managed by {APP_NAME}")
    lines.append(f"# Profile: {profile_name}")
    if modified_at is not None:
        lines.append(f"# Last modified: {modified_at.isoformat(timespec='seconds')}")
    lines.append("##")
    lines.append("")

    for entry in system:
        lines.append(render_entry(entry))
    lines.append("")

    lines.append(profile_start_marker(profile_name))
    for entry in profile_entries:
        if not entry.is_system_entry:
            lines.append(render_entry(entry))
    lines.append(PROFILE_END_MARKER)

    return "\n".join(lines) + "\n"


def generate_system_only(system: list[HostEntry]) -> str:
    """Hosts content with no profile applied."""
    lines = list(BANNER)
    for entry in system:
        lines.append(render_entry(entry))
    return "\n".join(lines) + "\n"
