"""Address, hostname and free-text validation shared by the parser and ingestor."""

from __future__ import annotations

import ipaddress
import re
import string

MAX_HOSTNAME_LENGTH = 253
MAX_LABEL_LENGTH = 63

_label_re = re.compile(r"[A-Za-z0-9][A-Za-z0-9-]*")


def is_valid_ip(value: str) -> bool:
    """Return True for a dotted-quad IPv4 or an IPv6 address."""
    if not value:
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_valid_hostname(value: str) -> bool:
    """Check a hostname against DNS label rules.

    At most 253 characters overall; every dot-separated label is 1-63
    characters, starts with a letter or digit and contains only letters,
    digits and hyphens.
    """
    if not value or len(value) > MAX_HOSTNAME_LENGTH:
        return False
    for label in value.split("."):
        if len(label) > MAX_LABEL_LENGTH:
            return False
        if not _label_re.fullmatch(label):
            return False
    return True


def looks_like_ip(token: str) -> bool:
    """Cheap lookahead used to tell a disabled entry from a comment."""
    return bool(token) and (token[0] in string.digits or token[0] == ":")


def sanitize_text(value: str) -> str:
    """Flatten user text to a single line."""
    return value.replace("\r", " ").replace("\n", " ").strip()
