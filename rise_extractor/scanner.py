"""
Text region scanning.

Extractors describe what they look for declaratively (RegionPattern) and
hand the patterns to a TextRegionScanner. Two scanners are provided:

  RegexRegionScanner — pattern matching over the raw markup text (default).
      A region ends at the FIRST closing tag with the same name, so a region
      containing a nested same-named element is cut short:
          <div class="text-block"><div>a</div> b</div>  →  inner "<div>a"
      This is the established extraction behavior and is kept on purpose.

  SoupRegionScanner — BeautifulSoup tree walk. Nested tags are balanced, so
      the region above yields "<div>a</div> b". Nested matches are reported
      separately (an outer and an inner text-block both match).

Scanners are pure: every call compiles/parses what it needs and returns a
fresh list; nothing is carried between calls.
"""

import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Iterable, Literal, Optional

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict

from .exceptions import ConfigurationError
from .logger import get_module_logger

logger = get_module_logger("scanner")


class RegionPattern(BaseModel):
    """
    Declarative description of a tagged region.

    Exactly one of two capture modes applies:
      - attr set: capture that attribute's value from the opening tag
        (e.g. the src of an <img>)
      - otherwise: capture the element's inner content; body="text" only
        accepts a body without child tags
    """
    model_config = ConfigDict(frozen=True)

    kind: str
    tag: str
    class_contains: Optional[str] = None
    body: Literal["markup", "text"] = "markup"
    attr: Optional[str] = None


class RegionMatch(BaseModel):
    """One occurrence of a RegionPattern."""
    kind: str
    inner: str      # Inner content, or the captured attribute value
    raw: str        # The matched markup


class TextRegionScanner(ABC):
    """Finds every occurrence of each pattern in a document."""

    @abstractmethod
    def scan(self, document: str, patterns: Iterable[RegionPattern]) -> list[RegionMatch]:
        """
        Scan a document for a list of patterns.

        Results are grouped by pattern, in the order the patterns are given,
        and in left-to-right document order within one pattern. Patterns are
        scanned independently; the same span may match more than one.
        """
        pass


@lru_cache(maxsize=None)
def compile_pattern(pattern: RegionPattern) -> re.Pattern:
    """Translate a RegionPattern into the equivalent case-insensitive regex."""
    tag = re.escape(pattern.tag)

    if pattern.attr:
        attr = re.escape(pattern.attr)
        return re.compile(rf'<{tag}[^>]*{attr}="([^"]+)"[^>]*>', re.IGNORECASE)

    opening = rf'<{tag}[^>]*'
    if pattern.class_contains:
        opening += rf'class="[^"]*{re.escape(pattern.class_contains)}[^"]*"[^>]*'

    # "markup" is lazy: it stops at the first closing tag of the same name
    body = r'[^<]+' if pattern.body == "text" else r'[\s\S]*?'
    return re.compile(rf'{opening}>({body})</{tag}>', re.IGNORECASE)


class RegexRegionScanner(TextRegionScanner):
    """Pattern matching over raw markup text."""

    def scan(self, document: str, patterns: Iterable[RegionPattern]) -> list[RegionMatch]:
        matches = []
        for pattern in patterns:
            regex = compile_pattern(pattern)
            for m in regex.finditer(document):
                matches.append(RegionMatch(kind=pattern.kind, inner=m.group(1), raw=m.group(0)))
        return matches


class SoupRegionScanner(TextRegionScanner):
    """Tree-based scanning with BeautifulSoup."""

    def _parse(self, document: str) -> BeautifulSoup:
        # Parser fallback chain: html5lib → lxml → html.parser.
        # html5lib follows the WHATWG algorithm and copes with the worst
        # markup; html.parser is always available.
        try:
            return BeautifulSoup(document, 'html5lib')
        except Exception as e:
            logger.warning(f"html5lib parsing failed, trying lxml: {e}")
            try:
                return BeautifulSoup(document, 'lxml')
            except Exception as e2:
                logger.warning(f"lxml parsing also failed: {e2}")
                return BeautifulSoup(document, 'html.parser')

    def _class_matches(self, elem, needle: str) -> bool:
        classes = elem.get('class') or []
        if isinstance(classes, str):
            classes = [classes]
        return needle.lower() in ' '.join(classes).lower()

    def _match(self, elem, pattern: RegionPattern) -> Optional[RegionMatch]:
        if pattern.attr:
            value = elem.get(pattern.attr)
            if not value:
                return None
            return RegionMatch(kind=pattern.kind, inner=value, raw=str(elem))

        if pattern.class_contains and not self._class_matches(elem, pattern.class_contains):
            return None

        if pattern.body == "text":
            if elem.find(True) is not None or not elem.string:
                return None
            inner = str(elem.string)
        else:
            inner = elem.decode_contents()

        return RegionMatch(kind=pattern.kind, inner=inner, raw=str(elem))

    def scan(self, document: str, patterns: Iterable[RegionPattern]) -> list[RegionMatch]:
        soup = self._parse(document)
        matches = []
        for pattern in patterns:
            for elem in soup.find_all(pattern.tag.lower()):
                match = self._match(elem, pattern)
                if match is not None:
                    matches.append(match)
        return matches


SCANNERS = {
    "regex": RegexRegionScanner,
    "soup": SoupRegionScanner,
}


def create_scanner(name: str = "regex") -> TextRegionScanner:
    """
    Factory for scanners by configuration name.

    Raises:
        ConfigurationError: for an unknown scanner name
    """
    try:
        return SCANNERS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown scanner: {name!r}",
            details={"available": sorted(SCANNERS)}
        )
