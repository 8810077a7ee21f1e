"""Value types: host entries, hosts file lines and profiles."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Union

from sanehosts.validate import is_valid_hostname, is_valid_ip, sanitize_text

SYSTEM_HOSTNAMES = frozenset({"localhost", "broadcasthost", "local"})
LOOPBACK_ADDRESSES = frozenset({"127.0.0.1", "::1"})

PROFILE_COLORS = ("gray", "red", "orange", "yellow", "green", "blue", "purple", "pink")


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HostEntry:
    """A single ``ip hostname...`` mapping.

    Values are immutable; the ``with_*`` helpers return an edited copy that
    keeps the same ``id``.
    """

    ip_address: str
    hostnames: tuple[str, ...]
    comment: str | None = None
    is_enabled: bool = True
    line_number: int | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        hostnames = tuple(self.hostnames)
        if not hostnames:
            raise ValueError("HostEntry requires at least one hostname")
        object.__setattr__(self, "hostnames", hostnames)

    @classmethod
    def create(
        cls,
        ip_address: str,
        hostnames: str | list[str] | tuple[str, ...],
        comment: str | None = None,
        is_enabled: bool = True,
    ) -> HostEntry:
        """Build an entry from raw user input.

        Invalid hostnames are dropped and the comment is flattened to one
        line. Raises ValueError for an invalid address or when no hostname
        survives.
        """
        if isinstance(hostnames, str):
            hostnames = hostnames.split()
        valid = tuple(h for h in hostnames if is_valid_hostname(h))
        if not valid:
            raise ValueError(f"No valid hostname in {list(hostnames)!r}")
        return cls(
            ip_address=_checked_ip(ip_address),
            hostnames=valid,
            comment=_clean_comment(comment),
            is_enabled=is_enabled,
        )

    @property
    def primary_hostname(self) -> str:
        return self.hostnames[0]

    @property
    def is_system_entry(self) -> bool:
        return any(h.lower() in SYSTEM_HOSTNAMES for h in self.hostnames)

    @property
    def is_loopback(self) -> bool:
        return self.ip_address in LOOPBACK_ADDRESSES

    @property
    def hosts_line(self) -> str:
        prefix = "" if self.is_enabled else "# "
        line = f"{prefix}{self.ip_address}\t{' '.join(self.hostnames)}"
        if self.comment:
            line += f" # {self.comment}"
        return line

    def with_enabled(self, enabled: bool) -> HostEntry:
        return replace(self, is_enabled=enabled)

    def toggled(self) -> HostEntry:
        return replace(self, is_enabled=not self.is_enabled)

    def with_ip(self, ip_address: str) -> HostEntry:
        return replace(self, ip_address=_checked_ip(ip_address))

    def with_comment(self, comment: str | None) -> HostEntry:
        return replace(self, comment=_clean_comment(comment))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ip_address": self.ip_address,
            "hostnames": list(self.hostnames),
            "comment": self.comment,
            "is_enabled": self.is_enabled,
            "line_number": self.line_number,
        }

    @classmethod
    def from_dict(cls, data: dict) -> HostEntry:
        return cls(
            ip_address=data["ip_address"],
            hostnames=tuple(data["hostnames"]),
            comment=data.get("comment"),
            is_enabled=data.get("is_enabled", True),
            line_number=data.get("line_number"),
            id=data.get("id") or _new_id(),
        )


def _checked_ip(ip_address: str) -> str:
    ip_address = ip_address.strip()
    if not is_valid_ip(ip_address):
        raise ValueError(f"Invalid IP address: {ip_address!r}")
    return ip_address


def _clean_comment(comment: str | None) -> str | None:
    if comment is None:
        return None
    cleaned = sanitize_text(comment)
    return cleaned or None


@dataclass(frozen=True)
class HostComment:
    """A comment-only line, passed through verbatim."""

    text: str
    line_number: int | None = None
    is_invalid: bool = False

    @property
    def hosts_line(self) -> str:
        return f"# {self.text}"


@dataclass(frozen=True)
class Blank:
    line_number: int | None = None

    @property
    def hosts_line(self) -> str:
        return ""


HostsLine = Union[HostEntry, HostComment, Blank]


@dataclass(frozen=True)
class ProfileSource:
    """Where a profile's entries came from."""

    kind: str = "local"
    url: str | None = None
    last_fetched: datetime | None = None
    source_count: int = 0

    @classmethod
    def local(cls) -> ProfileSource:
        return cls("local")

    @classmethod
    def remote(cls, url: str, last_fetched: datetime | None = None) -> ProfileSource:
        return cls("remote", url=url, last_fetched=last_fetched)

    @classmethod
    def merged(cls, source_count: int) -> ProfileSource:
        return cls("merged", source_count=source_count)

    @classmethod
    def system(cls) -> ProfileSource:
        return cls("system")

    @property
    def display_name(self) -> str:
        if self.kind == "merged":
            return f"Merged ({self.source_count} sources)"
        return self.kind.capitalize()

    @property
    def is_remote(self) -> bool:
        return self.kind == "remote"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "url": self.url,
            "last_fetched": self.last_fetched.isoformat() if self.last_fetched else None,
            "source_count": self.source_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ProfileSource:
        fetched = data.get("last_fetched")
        return cls(
            kind=data.get("kind", "local"),
            url=data.get("url"),
            last_fetched=datetime.fromisoformat(fetched) if fetched else None,
            source_count=data.get("source_count", 0),
        )


@dataclass(frozen=True)
class Profile:
    name: str
    entries: tuple[HostEntry, ...] = ()
    source: ProfileSource = field(default_factory=ProfileSource.local)
    color_tag: str = "gray"
    sort_order: int = 0
    is_active: bool = False
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", sanitize_text(self.name))
        object.__setattr__(self, "entries", tuple(self.entries))

    @property
    def enabled_count(self) -> int:
        return sum(1 for e in self.entries if e.is_enabled)

    @property
    def disabled_count(self) -> int:
        return sum(1 for e in self.entries if not e.is_enabled)

    def with_entries(self, entries: list[HostEntry] | tuple[HostEntry, ...]) -> Profile:
        return replace(self, entries=tuple(entries), modified_at=_now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "entries": [e.to_dict() for e in self.entries],
            "source": self.source.to_dict(),
            "color_tag": self.color_tag,
            "sort_order": self.sort_order,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Profile:
        return cls(
            name=data["name"],
            entries=tuple(HostEntry.from_dict(e) for e in data.get("entries", [])),
            source=ProfileSource.from_dict(data.get("source", {})),
            color_tag=data.get("color_tag", "gray"),
            sort_order=data.get("sort_order", 0),
            is_active=data.get("is_active", False),
            created_at=datetime.fromisoformat(data["created_at"]),
            modified_at=datetime.fromisoformat(data["modified_at"]),
            id=data.get("id") or _new_id(),
        )
