"""
Content sanitization for the job aid.

Turns a full lesson document into a presentation-safe fragment: scripts,
styles, Rise player widgets and page chrome are removed, the body is
unwrapped and whitespace is collapsed. Inline markup (<p>, <strong>, ...)
is kept; the renderer decides how to draw it.

Design principle: NEVER FAIL on bad HTML. Unbalanced markup just means
less (or more) gets removed.
"""

import re

from .logger import get_module_logger

logger = get_module_logger("sanitizer")

TAG_PATTERN = re.compile(r'<[^>]*>')
WHITESPACE_PATTERN = re.compile(r'\s+')

# Removed before the body is unwrapped: scripts and styles may sit in <head>
SCRIPT_STYLE_PATTERNS = [
    re.compile(r'<script[\s\S]*?</script>', re.IGNORECASE),
    re.compile(r'<style[\s\S]*?</style>', re.IGNORECASE),
]

# Rise player and interactive-only widgets have no meaning on paper
RISE_WIDGET_PATTERNS = [
    re.compile(r'<div[^>]*class="[^"]*rise-player[^"]*"[^>]*>[\s\S]*?</div>', re.IGNORECASE),
    re.compile(r'<div[^>]*data-rise[^>]*>[\s\S]*?</div>', re.IGNORECASE),
]

BODY_PATTERN = re.compile(r'<body[^>]*>([\s\S]*)</body>', re.IGNORECASE)

CHROME_PATTERNS = [
    re.compile(r'<nav[\s\S]*?</nav>', re.IGNORECASE),
    re.compile(r'<header[\s\S]*?</header>', re.IGNORECASE),
    re.compile(r'<footer[\s\S]*?</footer>', re.IGNORECASE),
    re.compile(r'<div[^>]*class="[^"]*nav[^"]*"[^>]*>[\s\S]*?</div>', re.IGNORECASE),
]

# Containers left empty by the removals above, e.g. <div class="x"> </div>
EMPTY_ELEMENT_PATTERN = re.compile(r'<(\w+)[^>]*>\s*</\1>', re.IGNORECASE)


def clean_text(text: str) -> str:
    """Strip every tag, collapse whitespace and trim."""
    cleaned = TAG_PATTERN.sub('', text)
    return WHITESPACE_PATTERN.sub(' ', cleaned).strip()


class ContentSanitizer:
    """Produces the read-only lesson content shown in the job aid."""

    def sanitize(self, content: str) -> str:
        cleaned = content

        # Order matters: strip scripts/styles and widgets from the whole
        # document, then narrow to the body, then strip page chrome.
        for pattern in SCRIPT_STYLE_PATTERNS:
            cleaned = pattern.sub('', cleaned)

        for pattern in RISE_WIDGET_PATTERNS:
            cleaned = pattern.sub('', cleaned)

        body = BODY_PATTERN.search(cleaned)
        if body:
            cleaned = body.group(1)

        for pattern in CHROME_PATTERNS:
            cleaned = pattern.sub('', cleaned)

        # Single pass; nested empties one level up are left in place
        cleaned = EMPTY_ELEMENT_PATTERN.sub('', cleaned)

        cleaned = WHITESPACE_PATTERN.sub(' ', cleaned).strip()
        logger.debug(f"Sanitized {len(content)} chars down to {len(cleaned)}")
        return cleaned


def sanitize(content: str) -> str:
    """Convenience function to sanitize a lesson document."""
    return ContentSanitizer().sanitize(content)
