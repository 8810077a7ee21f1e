"""Command line front end for managing hosts profiles."""

from __future__ import annotations

import argparse
import functools
import os
import sys
import time
from dataclasses import replace
from pathlib import Path

from sanehosts import __version__
from sanehosts.config import ProfileStore, Settings, load_settings
from sanehosts.errors import IngestError, SaneHostsError
from sanehosts.generator import generate_merged
from sanehosts.hosts import (
    DirectWriter,
    HostsWriter,
    SudoWriter,
    activate_profile,
    deactivate,
    flush_dns_cache,
    load_system_entries,
)
from sanehosts.ingest import CancelToken, IngestJob, ProgressCallback
from sanehosts.logs import setup_logging
from sanehosts.merge import merge_profiles
from sanehosts.models import Profile
from sanehosts.parser import invalid_lines, parse
from sanehosts.presets import PRESETS, TEMPLATES
from sanehosts.remote import FetchOutcome, fetch, fetch_all, merge_fetched
from sanehosts.ui import (
    import_progress,
    print_error,
    print_info,
    print_success,
    print_warning,
    show_invalid_lines,
    show_presets,
    show_profile_detail,
    show_profiles,
    show_summary_panel,
    show_templates,
)

POLL_INTERVAL = 0.1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sanehosts", description="Switch between hosts file profiles.")
    p.add_argument("--version", action="version", version=f"sanehosts {__version__}")
    p.add_argument("--profiles-dir", type=Path, default=None, help=argparse.SUPPRESS)

    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List profiles")

    p_show = sub.add_parser("show", help="Show a profile and its entries")
    p_show.add_argument("name")

    sub.add_parser("templates", help="List built-in profile templates")
    sub.add_parser("presets", help="List blocklist presets")

    p_new = sub.add_parser("new", help="Create a local profile")
    p_new.add_argument("name")
    p_new.add_argument("--template", choices=sorted(TEMPLATES), default=None)

    p_import = sub.add_parser("import", help="Import a remote hosts file or blocklist")
    p_import.add_argument("url")
    p_import.add_argument("--name", required=True)

    p_import_file = sub.add_parser("import-file", help="Import a local hosts file or blocklist")
    p_import_file.add_argument("path", type=Path)
    p_import_file.add_argument("--name", required=True)

    p_preset = sub.add_parser("preset", help="Download a preset's blocklists into one profile")
    p_preset.add_argument("key", choices=sorted(PRESETS))
    p_preset.add_argument("--name", default=None)

    p_merge = sub.add_parser("merge", help="Merge profiles into a new profile")
    p_merge.add_argument("name")
    p_merge.add_argument("sources", nargs="+")

    p_render = sub.add_parser("render", help="Print the hosts file a profile would produce")
    p_render.add_argument("name")

    p_activate = sub.add_parser("activate", help="Write a profile to the system hosts file")
    p_activate.add_argument("name")

    sub.add_parser("deactivate", help="Restore the system-only hosts file")

    p_check = sub.add_parser("check", help="Report invalid lines in a hosts file")
    p_check.add_argument("path", type=Path)

    return p


# ---------------------------------------------------------------------------
# Background imports
# ---------------------------------------------------------------------------


def _run_job(job: IngestJob, label: str):
    """Wait for ``job`` while showing progress; Ctrl+C cancels it."""
    with import_progress(label) as update:
        try:
            while not job.done():
                update(job.progress)
                time.sleep(POLL_INTERVAL)
        except KeyboardInterrupt:
            job.cancel()
            print_warning("Cancelling import...")
        return job.result()


def _fetch_preset(
    urls: list[str], settings: Settings, cancel: CancelToken, on_progress: ProgressCallback | None = None
) -> list[FetchOutcome]:
    return fetch_all(
        urls,
        max_records=settings.max_records,
        timeout=settings.request_timeout,
        cancel=cancel,
        on_progress=on_progress,
    )


def _report_truncation(truncated: bool, settings: Settings) -> None:
    if truncated:
        print_warning(f"Source was larger than {settings.max_records:,} entries; the rest was skipped.")


def _save_new(store: ProfileStore, profile: Profile) -> Profile:
    profile = replace(profile, name=store.unique_name(profile.name), sort_order=store.next_sort_order())
    store.save(profile)
    return profile


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_new(store: ProfileStore, name: str, template_key: str | None) -> int:
    if store.find(name) is not None:
        print_error(f"Profile '{name}' already exists.")
        return 1
    if template_key:
        profile = TEMPLATES[template_key].create_profile(name)
    else:
        profile = Profile(name=name)
    _save_new(store, profile)
    print_success(f"Created profile '{name}' with {len(profile.entries)} entries.")
    return 0


def _cmd_import(store: ProfileStore, settings: Settings, url: str, name: str) -> int:
    task = functools.partial(
        fetch, url, max_records=settings.max_records, timeout=settings.request_timeout
    )
    remote = _run_job(IngestJob(task), f"Importing {url}")
    profile = _save_new(store, remote.to_profile(name))
    _report_truncation(remote.truncated, settings)
    print_success(f"Imported {remote.entry_count:,} entries into '{profile.name}'.")
    return 0


def _cmd_import_file(store: ProfileStore, settings: Settings, path: Path, name: str) -> int:
    with path.open("rb") as handle:
        result = _run_job(IngestJob.for_stream(handle, settings.max_records), f"Importing {path}")
    profile = _save_new(store, Profile(name=name, entries=result.entries))
    _report_truncation(result.truncated, settings)
    print_success(f"Imported {result.count:,} entries into '{profile.name}'.")
    return 0


def _cmd_preset(store: ProfileStore, settings: Settings, key: str, name: str | None) -> int:
    preset = PRESETS[key]
    urls = [s.url for s in preset.sources()]
    outcomes = _run_job(
        IngestJob(functools.partial(_fetch_preset, urls, settings)), f"Downloading {len(urls)} blocklists"
    )
    for outcome in outcomes:
        if outcome.error is not None:
            print_warning(f"{outcome.url}: {outcome.error}")
        elif outcome.file.truncated:
            _report_truncation(True, settings)

    entries = merge_fetched(outcomes)
    if not entries:
        print_error("None of the preset's blocklists could be downloaded.")
        return 1
    ok = sum(1 for o in outcomes if o.ok)
    profile = replace(preset.create_profile(entries, source_count=ok), name=name or preset.name)
    profile = _save_new(store, profile)
    print_success(f"Created '{profile.name}' with {len(entries):,} entries from {ok}/{len(outcomes)} sources.")
    return 0


def _cmd_merge(store: ProfileStore, name: str, sources: list[str]) -> int:
    profiles = [store.get(s) for s in sources]
    merged = _save_new(store, merge_profiles(profiles, name))
    total = sum(len(p.entries) for p in profiles)
    show_summary_panel(
        "Merged",
        [
            f"Profile:    [bold]{merged.name}[/bold]",
            f"Sources:    [cyan]{len(profiles)}[/cyan]",
            f"Entries:    [cyan]{len(merged.entries):,}[/cyan] ({total - len(merged.entries):,} duplicates dropped)",
        ],
    )
    return 0


def _writer_for(hosts_file: Path) -> HostsWriter:
    if os.access(hosts_file, os.W_OK):
        return DirectWriter()
    return SudoWriter()


def _system_entries(settings: Settings) -> list:
    hosts_file = Path(settings.hosts_file)
    if not hosts_file.exists():
        print_warning(f"{hosts_file} not found; rendering without system entries.")
        return []
    return load_system_entries(hosts_file)


def _cmd_render(store: ProfileStore, settings: Settings, name: str) -> int:
    profile = store.get(name)
    text = generate_merged(_system_entries(settings), profile.name, list(profile.entries))
    sys.stdout.write(text)
    return 0


def _cmd_activate(store: ProfileStore, settings: Settings, name: str) -> int:
    profile = store.get(name)
    hosts_file = Path(settings.hosts_file)
    system = load_system_entries(hosts_file)

    flush = flush_dns_cache if settings.flush_dns else None
    activate_profile(profile, system, _writer_for(hosts_file), hosts_file, flush=flush)
    store.set_active(profile.name)
    print_success(f"Activated '{profile.name}' ({profile.enabled_count:,} enabled entries).")
    return 0


def _cmd_deactivate(store: ProfileStore, settings: Settings) -> int:
    hosts_file = Path(settings.hosts_file)
    system = load_system_entries(hosts_file)
    flush = flush_dns_cache if settings.flush_dns else None
    deactivate(system, _writer_for(hosts_file), hosts_file, flush=flush)
    store.set_active(None)
    print_success("Restored the system hosts file.")
    return 0


def _cmd_check(path: Path) -> int:
    lines = parse(path.read_text(encoding="utf-8", errors="replace"))
    bad = invalid_lines(lines)
    show_invalid_lines(bad)
    return 1 if bad else 0


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        settings.validate()
        setup_logging(settings.log_level)
        store = ProfileStore(args.profiles_dir)

        if args.cmd == "list":
            show_profiles(store.profiles())
            return 0
        if args.cmd == "show":
            show_profile_detail(store.get(args.name))
            return 0
        if args.cmd == "templates":
            show_templates(TEMPLATES)
            return 0
        if args.cmd == "presets":
            show_presets(PRESETS)
            return 0
        if args.cmd == "new":
            return _cmd_new(store, args.name, args.template)
        if args.cmd == "import":
            return _cmd_import(store, settings, args.url, args.name)
        if args.cmd == "import-file":
            return _cmd_import_file(store, settings, args.path, args.name)
        if args.cmd == "preset":
            return _cmd_preset(store, settings, args.key, args.name)
        if args.cmd == "merge":
            return _cmd_merge(store, args.name, args.sources)
        if args.cmd == "render":
            return _cmd_render(store, settings, args.name)
        if args.cmd == "activate":
            return _cmd_activate(store, settings, args.name)
        if args.cmd == "deactivate":
            return _cmd_deactivate(store, settings)
        if args.cmd == "check":
            return _cmd_check(args.path)

        parser.error("unknown command")
        return 2
    except IngestError as e:
        print_error(str(e))
        if e.recovery_suggestion:
            print_info(e.recovery_suggestion)
        return 1
    except SaneHostsError as e:
        print_error(str(e))
        return 1
    except (OSError, ValueError) as e:
        print_error(f"error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
