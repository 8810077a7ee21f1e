"""Built-in profile templates, curated blocklists and one-click presets."""

from __future__ import annotations

from dataclasses import dataclass, field

from sanehosts.models import HostEntry, Profile, ProfileSource


@dataclass(frozen=True)
class Template:
    name: str
    description: str
    color_tag: str
    mappings: list[tuple[str, list[str], str | None]] = field(default_factory=list)

    def entries(self) -> list[HostEntry]:
        """Fresh entries every call, so profiles never share ids."""
        return [HostEntry.create(ip, hosts, comment) for ip, hosts, comment in self.mappings]

    def create_profile(self, name: str | None = None) -> Profile:
        return Profile(name=name or self.name, entries=tuple(self.entries()), color_tag=self.color_tag)


TEMPLATES: dict[str, Template] = {
    "ad-blocking": Template(
        name="Ad Blocking",
        description="Block common ad and tracking domains",
        color_tag="red",
        mappings=[
            ("0.0.0.0", ["ads.google.com"], "Google Ads"),
            ("0.0.0.0", ["pagead2.googlesyndication.com"], None),
            ("0.0.0.0", ["ad.doubleclick.net"], None),
        ],
    ),
    "development": Template(
        name="Development",
        description="Local development mappings",
        color_tag="blue",
        mappings=[
            ("127.0.0.1", ["local.dev", "api.local.dev"], None),
            ("127.0.0.1", ["test.local"], None),
        ],
    ),
    "social": Template(
        name="Social Media Block",
        description="Block social media distractions",
        color_tag="purple",
        mappings=[
            ("0.0.0.0", ["facebook.com", "www.facebook.com"], None),
            ("0.0.0.0", ["twitter.com", "www.twitter.com", "x.com"], None),
            ("0.0.0.0", ["instagram.com", "www.instagram.com"], None),
            ("0.0.0.0", ["tiktok.com", "www.tiktok.com"], None),
        ],
    ),
    "privacy": Template(
        name="Privacy",
        description="Block telemetry and analytics",
        color_tag="green",
        mappings=[
            ("0.0.0.0", ["telemetry.microsoft.com"], None),
            ("0.0.0.0", ["metrics.apple.com"], None),
            ("0.0.0.0", ["analytics.google.com"], None),
        ],
    ),
}


@dataclass(frozen=True)
class BlocklistSource:
    id: str
    name: str
    description: str
    url: str
    category: str
    estimated_entries: str
    maintainer: str
    recommended: bool = False


BLOCKLISTS: dict[str, BlocklistSource] = {
    s.id: s
    for s in [
        BlocklistSource(
            "steven-black-unified", "Steven Black Unified",
            "Comprehensive ad & malware blocking. Best for most users.",
            "https://raw.githubusercontent.com/StevenBlack/hosts/master/hosts",
            "Recommended", "170K", "Steven Black", recommended=True,
        ),
        BlocklistSource(
            "hagezi-light", "Hagezi Light",
            "Balanced blocking with minimal false positives",
            "https://raw.githubusercontent.com/hagezi/dns-blocklists/main/hosts/light.txt",
            "Recommended", "70K", "Hagezi", recommended=True,
        ),
        BlocklistSource(
            "peter-lowe", "Peter Lowe's List",
            "Lightweight, well-maintained ad & tracker list",
            "https://pgl.yoyo.org/adservers/serverlist.php?hostformat=hosts&showintro=0",
            "Recommended", "3K", "Peter Lowe", recommended=True,
        ),
        BlocklistSource(
            "adaway", "AdAway Default",
            "Popular Android ad blocking list, works everywhere",
            "https://adaway.org/hosts.txt",
            "Ads & Trackers", "6K", "AdAway Team",
        ),
        BlocklistSource(
            "steven-black-fakenews", "Steven Black Fakenews",
            "Fake news site blocking",
            "https://raw.githubusercontent.com/StevenBlack/hosts/master/alternates/fakenews-only/hosts",
            "Fake News", "1K", "Steven Black",
        ),
        BlocklistSource(
            "steven-black-gambling", "Steven Black Gambling",
            "Gambling site blocking",
            "https://raw.githubusercontent.com/StevenBlack/hosts/master/alternates/gambling-only/hosts",
            "Gambling", "2K", "Steven Black",
        ),
        BlocklistSource(
            "steven-black-social", "Steven Black Social",
            "Social network blocking",
            "https://raw.githubusercontent.com/StevenBlack/hosts/master/alternates/social-only/hosts",
            "Social Media", "3K", "Steven Black",
        ),
        BlocklistSource(
            "someonewhocares", "SomeoneWhoCares",
            "Ad, tracking, and malware blocking",
            "https://someonewhocares.org/hosts/hosts",
            "Ads & Trackers", "15K", "Dan Pollock",
        ),
        BlocklistSource(
            "urlhaus", "URLhaus Malware",
            "Real-time malware URL blocking from abuse.ch",
            "https://urlhaus.abuse.ch/downloads/hostfile/",
            "Malware & Security", "10K", "abuse.ch",
        ),
    ]
}


@dataclass(frozen=True)
class Preset:
    """A named bundle of blocklists, merged into a single profile."""

    name: str
    description: str
    color_tag: str
    blocklist_ids: list[str] = field(default_factory=list)

    def sources(self) -> list[BlocklistSource]:
        return [BLOCKLISTS[i] for i in self.blocklist_ids if i in BLOCKLISTS]

    def create_profile(self, entries: list[HostEntry], source_count: int | None = None) -> Profile:
        """``source_count`` is how many lists were actually fetched; defaults to all of them."""
        if source_count is None:
            source_count = len(self.blocklist_ids)
        return Profile(
            name=self.name,
            entries=tuple(entries),
            source=ProfileSource.merged(source_count),
            color_tag=self.color_tag,
        )


_ESSENTIALS = ["steven-black-unified", "hagezi-light", "peter-lowe"]
_FAMILY = _ESSENTIALS + ["steven-black-gambling"]
_FOCUS = _FAMILY + ["steven-black-social"]

PRESETS: dict[str, Preset] = {
    "essentials": Preset("Essentials", "Ads, trackers, and malware. Safe for everyone.", "blue", _ESSENTIALS),
    "family-safe": Preset("Family Safe", "Essentials + gambling sites.", "green", _FAMILY),
    "focus-mode": Preset("Focus Mode", "Family Safe + social media distractions.", "purple", _FOCUS),
    "kitchen-sink": Preset(
        "Kitchen Sink",
        "Maximum protection. Blocks everything we can.",
        "red",
        _FOCUS + ["steven-black-fakenews", "adaway", "someonewhocares", "urlhaus"],
    ),
}


def get_template(name: str) -> Template | None:
    return TEMPLATES.get(name)


def get_preset(name: str) -> Preset | None:
    return PRESETS.get(name)


def list_presets() -> list[Preset]:
    return list(PRESETS.values())
