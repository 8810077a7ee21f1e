"""System hosts file access: reading, privileged writes and DNS cache flushing."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from sanehosts.errors import DNSFlushError, HostsWriteError
from sanehosts.generator import generate_merged, generate_system_only
from sanehosts.models import HostEntry, Profile
from sanehosts.parser import extract_entries, parse, system_entries

logger = logging.getLogger(__name__)

HOSTS_FILE = Path("/etc/hosts")


def _run(cmd: list[str], check: bool = False) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, capture_output=True, text=True, check=check)


def read_system_hosts(path: Path = HOSTS_FILE) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


def load_system_entries(path: Path = HOSTS_FILE) -> list[HostEntry]:
    """System-critical entries (localhost, broadcasthost) from the live hosts file."""
    return system_entries(extract_entries(parse(read_system_hosts(path))))


class HostsWriter(Protocol):
    def write(self, content: str, path: Path) -> None: ...


def _write_temp(content: str, directory: Path | None = None) -> Path:
    fd, name = tempfile.mkstemp(dir=directory, prefix=".sanehosts.", suffix=".hosts", text=True)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(content)
    return Path(name)


class DirectWriter:
    """Atomic replace (temp file in the same directory + rename).

    Only works when the process may already write the target.
    """

    def write(self, content: str, path: Path) -> None:
        path = Path(path)
        try:
            tmp = _write_temp(content, path.parent)
        except OSError as exc:
            raise HostsWriteError(f"Failed to prepare hosts file: {exc}") from exc
        try:
            os.chmod(tmp, 0o644)
            os.replace(tmp, path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise HostsWriteError(f"Permission denied: {exc}") from exc
        logger.info("wrote %d bytes to %s", len(content), path)


class SudoWriter:
    """Stage the content in a temp file and copy it into place with ``sudo``."""

    def __init__(self, sudo: str = "sudo") -> None:
        self.sudo = sudo

    def write(self, content: str, path: Path) -> None:
        try:
            tmp = _write_temp(content)
        except OSError as exc:
            raise HostsWriteError(f"Failed to prepare hosts file: {exc}") from exc
        try:
            result = _run([self.sudo, "cp", str(tmp), str(path)])
        except FileNotFoundError as exc:
            raise HostsWriteError(f"{self.sudo} not found") from exc
        finally:
            tmp.unlink(missing_ok=True)
        if result.returncode != 0:
            raise HostsWriteError(f"Permission denied: {result.stderr.strip() or 'unknown error'}")
        logger.info("wrote %d bytes to %s via %s", len(content), path, self.sudo)


def flush_dns_cache() -> None:
    """Flush the resolver cache so hosts changes apply immediately."""
    if sys.platform == "darwin":
        try:
            result = _run(["dscacheutil", "-flushcache"])
        except FileNotFoundError as exc:
            raise DNSFlushError("dscacheutil not found") from exc
        if result.returncode != 0:
            raise DNSFlushError(f"dscacheutil exited with code {result.returncode}")
        hup = _run(["killall", "-HUP", "mDNSResponder"])
        if hup.returncode != 0:
            # dscacheutil already ran; this is best effort
            logger.warning("mDNSResponder HUP failed: %s", hup.stderr.strip())
        logger.info("flushed DNS cache")
        return

    resolvectl = shutil.which("resolvectl")
    if resolvectl is None:
        logger.info("no DNS cache service to flush on %s", sys.platform)
        return
    result = _run([resolvectl, "flush-caches"])
    if result.returncode != 0:
        raise DNSFlushError(f"resolvectl exited with code {result.returncode}")
    logger.info("flushed DNS cache")


def activate_profile(
    profile: Profile,
    system: list[HostEntry],
    writer: HostsWriter,
    hosts_file: Path = HOSTS_FILE,
    flush: Callable[[], None] | None = flush_dns_cache,
) -> str:
    """Write ``profile`` over the system entries, then flush DNS.

    Returns the content written. The flush only runs after a successful write.
    """
    content = generate_merged(system, profile.name, list(profile.entries))
    writer.write(content, hosts_file)
    if flush is not None:
        flush()
    logger.info("activated profile %r (%d entries)", profile.name, len(profile.entries))
    return content


def deactivate(
    system: list[HostEntry],
    writer: HostsWriter,
    hosts_file: Path = HOSTS_FILE,
    flush: Callable[[], None] | None = flush_dns_cache,
) -> str:
    """Restore a hosts file holding only the system entries."""
    content = generate_system_only(system)
    writer.write(content, hosts_file)
    if flush is not None:
        flush()
    logger.info("restored system-only hosts file")
    return content
