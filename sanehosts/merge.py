"""Combine entry collections, dropping repeated hostname sets."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sanehosts.models import HostEntry, Profile, ProfileSource

logger = logging.getLogger(__name__)

KEY_DELIMITER = ","


def dedup_key(entry: HostEntry) -> str:
    """Order-independent key over an entry's hostnames."""
    return KEY_DELIMITER.join(sorted(entry.hostnames))


def merge(collections: Iterable[Iterable[HostEntry]]) -> list[HostEntry]:
    """Merge collections in the order given; the first entry for a hostname set wins.

    Later duplicates are discarded whole, including a differing IP address or
    comment. Callers merging concurrently fetched sources must pass them in
    declaration order, not completion order.
    """
    seen: set[str] = set()
    merged: list[HostEntry] = []
    dropped = 0
    for collection in collections:
        for entry in collection:
            key = dedup_key(entry)
            if key in seen:
                dropped += 1
                continue
            seen.add(key)
            merged.append(entry)
    logger.debug("merged %d entries, dropped %d duplicates", len(merged), dropped)
    return merged


def merge_profiles(profiles: list[Profile], name: str) -> Profile:
    entries = merge(p.entries for p in profiles)
    return Profile(
        name=name,
        entries=tuple(entries),
        source=ProfileSource.merged(len(profiles)),
        color_tag="purple",
    )
