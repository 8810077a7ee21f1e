from datetime import datetime, timezone

from sanehosts.generator import (
    BANNER,
    PROFILE_END_MARKER,
    generate,
    generate_merged,
    generate_system_only,
    profile_start_marker,
    render_entry,
)
from sanehosts.models import Blank, HostComment, HostEntry

SYSTEM = [
    HostEntry.create("127.0.0.1", "localhost"),
    HostEntry.create("255.255.255.255", "broadcasthost"),
    HostEntry.create("::1", "localhost"),
]


def test_render_entry():
    assert render_entry(HostEntry.create("10.0.0.1", "a.test")) == "10.0.0.1\ta.test"
    disabled = HostEntry.create("10.0.0.1", ["a.test", "b.test"], "note", is_enabled=False)
    assert render_entry(disabled) == "# 10.0.0.1\ta.test b.test # note"


def test_generate_echoes_lines():
    lines = [HostComment("header"), Blank(), HostEntry.create("10.0.0.1", "a.test")]
    assert generate(lines) == "# header\n\n10.0.0.1\ta.test"


def test_generate_merged_layout():
    profile = [HostEntry.create("0.0.0.0", "ads.test"), HostEntry.create("10.0.0.1", "dev.test", is_enabled=False)]
    text = generate_merged(SYSTEM, "Blocker", profile)
    lines = text.split("\n")

    assert text.endswith("\n")
    assert lines[: len(BANNER)] == BANNER
    assert "# Managed by SaneHosts" in lines
    assert "# Profile: Blocker" in lines

    start = lines.index(profile_start_marker("Blocker"))
    end = lines.index(PROFILE_END_MARKER)
    assert lines[start + 1 : end] == ["0.0.0.0\tads.test", "# 10.0.0.1\tdev.test"]

    system_block = lines[: start]
    assert "127.0.0.1\tlocalhost" in system_block
    assert "255.255.255.255\tbroadcasthost" in system_block
    assert system_block.index("127.0.0.1\tlocalhost") < system_block.index("::1\tlocalhost")


def test_generate_merged_skips_system_entries_in_profile():
    profile = [HostEntry.create("127.0.0.1", "localhost"), HostEntry.create("0.0.0.0", "ads.test")]
    text = generate_merged(SYSTEM, "p", profile)
    lines = text.split("\n")
    start = lines.index(profile_start_marker("p"))
    end = lines.index(PROFILE_END_MARKER)
    assert lines[start + 1 : end] == ["0.0.0.0\tads.test"]
    assert text.count("127.0.0.1\tlocalhost") == 1


def test_generate_merged_is_deterministic():
    profile = [HostEntry.create("0.0.0.0", "ads.test")]
    assert generate_merged(SYSTEM, "p", profile) == generate_merged(SYSTEM, "p", profile)


def test_generate_merged_timestamp():
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    text = generate_merged(SYSTEM, "p", [], modified_at=stamp)
    assert "# Last modified: 2024-05-01T12:00:00+00:00" in text


def test_generate_merged_empty_profile():
    text = generate_merged([], "empty", [])
    assert f"{profile_start_marker('empty')}\n{PROFILE_END_MARKER}\n" in text


def test_generate_system_only():
    text = generate_system_only(SYSTEM)
    assert text.endswith("::1\tlocalhost\n")
    assert "Profile" not in text
