"""Settings and profile persistence (~/.config/sanehosts/)."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

from sanehosts.errors import ProfileError
from sanehosts.ingest import DEFAULT_MAX_RECORDS
from sanehosts.models import Profile

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get("SANEHOSTS_HOME", Path.home() / ".config" / "sanehosts"))
CONFIG_FILE = CONFIG_DIR / "config.json"
PROFILES_DIR = CONFIG_DIR / "profiles"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    hosts_file: str = "/etc/hosts"
    max_records: int = DEFAULT_MAX_RECORDS
    request_timeout: float = 30.0
    user_agent: str = ""
    log_level: str = "INFO"
    flush_dns: bool = True

    def validate(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of: {', '.join(LOG_LEVELS)}")
        if self.max_records < 1:
            raise ValueError("max_records must be positive")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", text=True)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp, path)
    except OSError:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def load_settings(path: Path | None = None) -> Settings:
    """Read settings from disk, then apply environment overrides."""
    path = path or CONFIG_FILE
    settings = Settings()
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("ignoring unreadable settings file %s: %s", path, exc)
            raw = {}
        known = {f.name for f in fields(Settings)}
        settings = replace(settings, **{k: v for k, v in raw.items() if k in known})

    if level := os.environ.get("SANEHOSTS_LOG_LEVEL"):
        settings.log_level = level.upper()
    if hosts_file := os.environ.get("SANEHOSTS_HOSTS_FILE"):
        settings.hosts_file = hosts_file
    return settings


def save_settings(settings: Settings, path: Path | None = None) -> None:
    _atomic_write_text(path or CONFIG_FILE, json.dumps(asdict(settings), indent=2) + "\n")


class ProfileStore:
    """Profiles stored as one JSON file each, keyed by profile id.

    Profile names are unique within a store.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = Path(directory or PROFILES_DIR)

    def _path(self, profile: Profile) -> Path:
        return self.directory / f"{profile.id}.json"

    def profiles(self) -> list[Profile]:
        if not self.directory.exists():
            return []
        profiles: list[Profile] = []
        for path in self.directory.glob("*.json"):
            try:
                profiles.append(Profile.from_dict(json.loads(path.read_text(encoding="utf-8"))))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError, OSError) as exc:
                logger.warning("skipping unreadable profile %s: %s", path.name, exc)
        profiles.sort(key=lambda p: (p.sort_order, p.name.lower()))
        return profiles

    def find(self, name: str) -> Profile | None:
        for profile in self.profiles():
            if profile.name == name:
                return profile
        return None

    def get(self, name: str) -> Profile:
        profile = self.find(name)
        if profile is None:
            raise ProfileError(f"Profile '{name}' not found.")
        return profile

    def save(self, profile: Profile) -> None:
        existing = self.find(profile.name)
        if existing is not None and existing.id != profile.id:
            raise ProfileError(f"Profile '{profile.name}' already exists.")
        _atomic_write_text(self._path(profile), json.dumps(profile.to_dict(), indent=2) + "\n")
        logger.debug("saved profile %r (%d entries)", profile.name, len(profile.entries))

    def delete(self, name: str) -> None:
        profile = self.get(name)
        self._path(profile).unlink(missing_ok=True)

    def next_sort_order(self) -> int:
        return max((p.sort_order for p in self.profiles()), default=-1) + 1

    def unique_name(self, base: str) -> str:
        taken = {p.name for p in self.profiles()}
        if base not in taken:
            return base
        counter = 1
        while f"{base} {counter}" in taken:
            counter += 1
        return f"{base} {counter}"

    def set_active(self, name: str | None) -> None:
        """Mark ``name`` as the active profile and clear the flag elsewhere."""
        for profile in self.profiles():
            should_be_active = profile.name == name
            if profile.is_active != should_be_active:
                self.save(replace(profile, is_active=should_be_active))
