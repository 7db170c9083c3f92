"""
Field extractors: lesson title, description and metadata.

Each field is tried against several patterns in a fixed priority order;
the first usable capture wins. Title falls back to a name derived from the
file name, description falls back to an empty string.
"""

import re

from .sanitizer import clean_text

# Highest priority first
TITLE_PATTERNS = [
    re.compile(r'<title[^>]*>([^<]+)</title>', re.IGNORECASE),
    re.compile(r'<h1[^>]*>([^<]+)</h1>', re.IGNORECASE),
    re.compile(r'<h2[^>]*>([^<]+)</h2>', re.IGNORECASE),
    re.compile(r'data-title="([^"]+)"', re.IGNORECASE),
    re.compile(r'title:\s*["\']([^"\']+)["\']', re.IGNORECASE),
]

# Rise stamps its own name on player pages ("Rise Course", "Rise 360");
# those titles say nothing about the lesson
BRAND_TOKEN = "rise"

DESCRIPTION_PATTERNS = [
    re.compile(r'<meta[^>]*name="description"[^>]*content="([^"]+)"', re.IGNORECASE),
    re.compile(r'<p[^>]*class="[^"]*summary[^"]*"[^>]*>([^<]+)</p>', re.IGNORECASE),
    re.compile(r'<div[^>]*class="[^"]*description[^"]*"[^>]*>([^<]+)</div>', re.IGNORECASE),
]

META_PATTERN = re.compile(r'<meta[^>]*name="([^"]+)"[^>]*content="([^"]+)"', re.IGNORECASE)
DATA_ATTR_PATTERN = re.compile(r'data-([^=]+)="([^"]+)"', re.IGNORECASE)

EXTENSION_PATTERN = re.compile(r'\.[^/.]+$')
WORD_START_PATTERN = re.compile(r'\b\w')


def title_from_file_name(file_name: str) -> str:
    """
    Derive a display title from a file name.

    "intro-to-safety.html" → "Intro To Safety". Only the first letter of each
    word changes case.
    """
    stem = EXTENSION_PATTERN.sub('', file_name)
    spaced = re.sub(r'[-_]', ' ', stem)
    return WORD_START_PATTERN.sub(lambda m: m.group(0).upper(), spaced)


def extract_title(content: str, file_name: str) -> str:
    for pattern in TITLE_PATTERNS:
        match = pattern.search(content)
        if not match:
            continue
        captured = match.group(1)
        if captured.strip() and BRAND_TOKEN not in captured.lower():
            return clean_text(captured)

    return title_from_file_name(file_name)


def extract_description(content: str) -> str:
    for pattern in DESCRIPTION_PATTERNS:
        match = pattern.search(content)
        if match and match.group(1).strip():
            return clean_text(match.group(1))
    return ""


def extract_metadata(content: str) -> dict[str, str]:
    """
    Collect <meta name/content> pairs and data-* attributes.

    Both passes scan the whole document; a later occurrence of a key
    overwrites an earlier one.
    """
    metadata = {}

    for name, value in META_PATTERN.findall(content):
        metadata[name] = value

    for name, value in DATA_ATTR_PATTERN.findall(content):
        metadata[f"data-{name}"] = value

    return metadata
