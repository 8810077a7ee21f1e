import json
from dataclasses import replace
from pathlib import Path

import pytest

from sanehosts.config import ProfileStore, Settings, load_settings, save_settings
from sanehosts.errors import ProfileError
from sanehosts.models import HostEntry, Profile


def test_settings_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("SANEHOSTS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SANEHOSTS_HOSTS_FILE", raising=False)
    settings = load_settings(tmp_path / "missing.json")
    assert settings == Settings()
    settings.validate()


def test_settings_round_trip(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("SANEHOSTS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SANEHOSTS_HOSTS_FILE", raising=False)
    path = tmp_path / "config.json"
    save_settings(Settings(max_records=500, flush_dns=False), path)
    loaded = load_settings(path)
    assert loaded.max_records == 500
    assert loaded.flush_dns is False


def test_settings_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"log_level": "INFO", "unknown": 1}), encoding="utf-8")
    monkeypatch.setenv("SANEHOSTS_LOG_LEVEL", "debug")
    monkeypatch.setenv("SANEHOSTS_HOSTS_FILE", str(tmp_path / "hosts"))

    settings = load_settings(path)

    assert settings.log_level == "DEBUG"
    assert settings.hosts_file == str(tmp_path / "hosts")


def test_corrupt_settings_fall_back(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("SANEHOSTS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SANEHOSTS_HOSTS_FILE", raising=False)
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path) == Settings()


@pytest.mark.parametrize(
    "changes",
    [{"log_level": "LOUD"}, {"max_records": 0}, {"request_timeout": 0}],
)
def test_settings_validate_rejects(changes):
    with pytest.raises(ValueError):
        replace(Settings(), **changes).validate()


def test_store_save_and_get(tmp_path: Path):
    store = ProfileStore(tmp_path)
    profile = Profile(name="Work", entries=[HostEntry.create("10.0.0.1", "jira.test")])
    store.save(profile)

    loaded = store.get("Work")
    assert loaded == profile
    assert store.find("Nope") is None
    with pytest.raises(ProfileError):
        store.get("Nope")


def test_store_rejects_duplicate_names(tmp_path: Path):
    store = ProfileStore(tmp_path)
    store.save(Profile(name="Work"))
    with pytest.raises(ProfileError):
        store.save(Profile(name="Work"))


def test_store_update_in_place(tmp_path: Path):
    store = ProfileStore(tmp_path)
    profile = Profile(name="Work")
    store.save(profile)
    store.save(profile.with_entries([HostEntry.create("10.0.0.1", "a.test")]))
    assert len(store.profiles()) == 1
    assert len(store.get("Work").entries) == 1


def test_store_ordering_and_naming(tmp_path: Path):
    store = ProfileStore(tmp_path)
    assert store.profiles() == []
    assert store.next_sort_order() == 0

    store.save(Profile(name="b", sort_order=1))
    store.save(Profile(name="a", sort_order=1))
    store.save(Profile(name="z", sort_order=0))

    assert [p.name for p in store.profiles()] == ["z", "a", "b"]
    assert store.next_sort_order() == 2
    assert store.unique_name("new") == "new"
    store.save(Profile(name="a 1"))
    assert store.unique_name("a") == "a 2"


def test_store_skips_unreadable_files(tmp_path: Path):
    store = ProfileStore(tmp_path)
    store.save(Profile(name="ok"))
    (tmp_path / "broken.json").write_text("{", encoding="utf-8")
    assert [p.name for p in store.profiles()] == ["ok"]


def test_store_set_active_and_delete(tmp_path: Path):
    store = ProfileStore(tmp_path)
    store.save(Profile(name="one"))
    store.save(Profile(name="two"))

    store.set_active("two")
    assert [p.name for p in store.profiles() if p.is_active] == ["two"]

    store.set_active("one")
    assert [p.name for p in store.profiles() if p.is_active] == ["one"]

    store.set_active(None)
    assert not any(p.is_active for p in store.profiles())

    store.delete("one")
    assert [p.name for p in store.profiles()] == ["two"]
