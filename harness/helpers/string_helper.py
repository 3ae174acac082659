# harness/helpers/string_helper.py
"""String utilities used by tests to build and check data."""

from __future__ import annotations

import random
import re
import string
from urllib.parse import urlparse

_SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def generate_random_string(length: int = 10, include_numbers: bool = True, include_special_chars: bool = False) -> str:
    chars = string.ascii_letters
    if include_numbers:
        chars += string.digits
    if include_special_chars:
        chars += _SPECIAL_CHARS
    return "".join(random.choice(chars) for _ in range(length))


def generate_random_email(domain: str = "example.com") -> str:
    return f"{generate_random_string(10).lower()}@{domain}"


def capitalize(value: str) -> str:
    if not value:
        return value
    return value[0].upper() + value[1:].lower()


def to_camel_case(value: str) -> str:
    words = re.split(r"[\s_\-]+", value.strip())
    words = [w for w in words if w]
    if not words:
        return ""
    return words[0][0].lower() + words[0][1:] + "".join(w[0].upper() + w[1:] for w in words[1:])


def to_snake_case(value: str) -> str:
    spaced = re.sub(r"\W+", " ", value)
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", spaced)
    return "_".join(w.lower() for w in spaced.split())


def truncate(value: str, max_length: int, suffix: str = "...") -> str:
    if len(value) <= max_length:
        return value
    return value[: max(max_length - len(suffix), 0)] + suffix


def remove_special_chars(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9\s]", "", value)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and (parsed.netloc or parsed.path))


def slugify(value: str) -> str:
    value = re.sub(r"[^\w\s-]", "", value.lower().strip())
    value = re.sub(r"[\s_-]+", "-", value)
    return value.strip("-")


def reverse(value: str) -> str:
    return value[::-1]


def count_occurrences(value: str, search: str) -> int:
    """Count non-overlapping regex matches of search in value."""
    return len(re.findall(search, value))


def mask(value: str, visible_chars: int = 2, mask_char: str = "*") -> str:
    if len(value) <= visible_chars * 2:
        return mask_char * len(value)
    hidden = mask_char * (len(value) - visible_chars * 2)
    return value[:visible_chars] + hidden + value[-visible_chars:]
