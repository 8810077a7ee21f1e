from sanehosts.models import HostEntry
from sanehosts.presets import BLOCKLISTS, PRESETS, TEMPLATES, get_preset, get_template, list_presets
from sanehosts.validate import is_valid_hostname, is_valid_ip


def test_templates_produce_valid_entries():
    for template in TEMPLATES.values():
        for entry in template.entries():
            assert is_valid_ip(entry.ip_address)
            assert all(is_valid_hostname(h) for h in entry.hostnames)


def test_template_profiles_do_not_share_ids():
    template = get_template("development")
    first = template.create_profile()
    second = template.create_profile("Dev 2")
    assert first.name == "Development"
    assert second.name == "Dev 2"
    assert {e.id for e in first.entries}.isdisjoint(e.id for e in second.entries)


def test_presets_reference_known_blocklists():
    for preset in PRESETS.values():
        assert preset.blocklist_ids
        assert all(i in BLOCKLISTS for i in preset.blocklist_ids)
        assert len(preset.sources()) == len(preset.blocklist_ids)


def test_presets_are_cumulative():
    essentials = set(PRESETS["essentials"].blocklist_ids)
    family = set(PRESETS["family-safe"].blocklist_ids)
    focus = set(PRESETS["focus-mode"].blocklist_ids)
    everything = set(PRESETS["kitchen-sink"].blocklist_ids)
    assert essentials < family < focus < everything


def test_preset_profile():
    preset = get_preset("essentials")
    profile = preset.create_profile([HostEntry.create("0.0.0.0", "ads.test")])
    assert profile.name == "Essentials"
    assert profile.source.display_name == "Merged (3 sources)"
    assert preset.create_profile([], source_count=2).source.source_count == 2
    assert get_preset("missing") is None
    assert len(list_presets()) == len(PRESETS)


def test_blocklist_urls_are_https():
    assert all(s.url.startswith("https://") for s in BLOCKLISTS.values())
