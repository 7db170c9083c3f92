"""
Extractor configuration.

Settings come from constructor arguments or from ``RISE_EXTRACTOR_*``
environment variables. The CLI loads a ``.env`` file (python-dotenv) before
calling ``ExtractorConfig.from_env()``.
"""

import logging
import os
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

# Signatures of Articulate Rise / Storyline output. Any one of them, in any
# letter case, marks a document as Rise content.
DEFAULT_RISE_MARKERS = [
    "rise-player",
    "rise-content",
    "articulate",
    "data-rise",
    "rise-lesson",
    "storyline",
    "articulate-content",
    "rise-course",
    "rise-block",
]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ExtractorConfig(BaseModel):
    """Tunable behavior of the course analyzer."""
    # "regex" reproduces the pattern-based extraction (a region ends at the
    # first same-named closing tag); "soup" balances nested tags.
    scanner: Literal["regex", "soup"] = "regex"
    markers: list[str] = Field(default_factory=lambda: list(DEFAULT_RISE_MARKERS))
    dedupe_media: bool = False          # Drop repeated (type, src) media per lesson
    concurrent_reads: bool = False      # Gather HTML reads instead of awaiting one by one
    log_level: int = logging.INFO

    @classmethod
    def create(cls, **kwargs) -> "ExtractorConfig":
        """Build a config, turning validation failures into ConfigurationError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid extractor configuration: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False)}
            )

    @classmethod
    def from_env(cls, **overrides) -> "ExtractorConfig":
        """
        Read settings from the environment.

        Recognized variables: RISE_EXTRACTOR_SCANNER, RISE_EXTRACTOR_MARKERS
        (comma-separated), RISE_EXTRACTOR_DEDUPE_MEDIA,
        RISE_EXTRACTOR_CONCURRENT_READS, RISE_EXTRACTOR_LOG_LEVEL.
        Keyword overrides win over the environment.
        """
        values = {}

        scanner = os.getenv("RISE_EXTRACTOR_SCANNER")
        if scanner:
            values["scanner"] = scanner.strip().lower()

        markers = os.getenv("RISE_EXTRACTOR_MARKERS")
        if markers:
            values["markers"] = [m.strip() for m in markers.split(",") if m.strip()]

        for key in ("dedupe_media", "concurrent_reads"):
            raw = os.getenv(f"RISE_EXTRACTOR_{key.upper()}")
            if raw is not None:
                values[key] = _parse_bool(raw, key)

        level = os.getenv("RISE_EXTRACTOR_LOG_LEVEL")
        if level:
            values["log_level"] = _parse_log_level(level)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.create(**values)


def _parse_bool(raw: str, key: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Invalid boolean for {key}: {raw!r}",
        details={"key": key, "value": raw}
    )


def _parse_log_level(raw: str) -> int:
    value = raw.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ConfigurationError(
            f"Unknown log level: {raw!r}",
            details={"value": raw}
        )
    return level


def load_config(config: Optional[ExtractorConfig] = None) -> ExtractorConfig:
    """Return the given config or one read from the environment."""
    return config if config is not None else ExtractorConfig.from_env()
