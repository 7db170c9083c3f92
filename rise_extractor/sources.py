"""
Input file handles.

The analyzer only needs a name, a relative path and an asynchronous text
read. LocalSourceFile reads from disk; MemorySourceFile wraps text that is
already loaded (uploads, tests).

Local files are decoded with the charset they declare in a <meta> tag,
remapped the way browsers remap it (WHATWG), so extracted text matches what
the course shows in a browser.
"""

import asyncio
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from .exceptions import SourceReadError
from .logger import get_module_logger

logger = get_module_logger("sources")


# WHATWG encoding spec: browsers silently remap these charsets.
# https://encoding.spec.whatwg.org/#names-and-labels
WHATWG_CHARSET_MAP = {
    'iso-8859-1': 'windows-1252',
    'iso8859-1': 'windows-1252',
    'iso88591': 'windows-1252',
    'latin-1': 'windows-1252',
    'latin1': 'windows-1252',
    'us-ascii': 'windows-1252',
    'ascii': 'windows-1252',
    'iso-8859-9': 'windows-1254',
    'iso-8859-11': 'windows-874',
}


def detect_charset_from_bytes(raw_bytes: bytes) -> str:
    """
    Detect charset from raw HTML bytes by scanning the first 2048 bytes
    for <meta charset=...> or <meta http-equiv="Content-Type" content="...; charset=...">.

    Returns the browser-equivalent charset or 'utf-8' as default.
    """
    # The HTML spec puts charset declarations in the first 1024 bytes
    head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

    charset = None

    m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
    if m:
        charset = m.group(1).strip().lower()

    if not charset:
        m = re.search(
            r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
            head_str, re.IGNORECASE
        )
        if m:
            charset = m.group(1).strip().lower()

    if not charset:
        return 'utf-8'

    return WHATWG_CHARSET_MAP.get(charset, charset)


def decode_html_bytes(raw_bytes: bytes) -> str:
    """Decode course file bytes using the declared charset."""
    charset = detect_charset_from_bytes(raw_bytes)
    try:
        text = raw_bytes.decode(charset, errors='replace')
    except LookupError:
        # Declared charset Python doesn't know about
        logger.debug(f"Unknown charset {charset!r}, decoding as utf-8")
        text = raw_bytes.decode('utf-8', errors='replace')
    # NULL bytes are never valid in HTML text content
    return text.replace('\x00', '')


class SourceFile(ABC):
    """A file from an exported course folder."""

    def __init__(self, name: str, relative_path: str):
        self.name = name
        self.relative_path = relative_path

    @abstractmethod
    async def read_text(self) -> str:
        """
        Read the file's text content.

        Raises:
            SourceReadError: if the content cannot be read or decoded
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.relative_path!r})"


class MemorySourceFile(SourceFile):
    """A course file whose text is already in memory."""

    def __init__(self, name: str, relative_path: Optional[str] = None, text: str = ""):
        super().__init__(name, relative_path or name)
        self._text = text

    async def read_text(self) -> str:
        return self._text


class LocalSourceFile(SourceFile):
    """A course file on the local filesystem."""

    def __init__(self, path: Union[str, Path], root: Union[str, Path, None] = None):
        self.path = Path(path)
        if root is not None:
            relative = self.path.relative_to(root).as_posix()
        else:
            relative = self.path.name
        super().__init__(self.path.name, relative)

    async def read_text(self) -> str:
        try:
            # Disk I/O runs in a worker thread so the event loop only
            # suspends at this await
            raw_bytes = await asyncio.to_thread(self.path.read_bytes)
        except OSError as e:
            raise SourceReadError(
                f"Could not read file: {e}",
                path=self.relative_path,
                details={"errno": e.errno}
            ) from e
        return decode_html_bytes(raw_bytes)


def collect_source_files(folder: Union[str, Path]) -> list[SourceFile]:
    """
    Build handles for every regular file under an exported course folder.

    Files are returned in sorted relative-path order so repeated runs see the
    same input order.

    Raises:
        SourceReadError: if the folder does not exist or is not a directory
    """
    root = Path(folder)
    if not root.is_dir():
        raise SourceReadError(
            "Course folder not found or not a directory",
            path=str(root)
        )

    files = [
        LocalSourceFile(p, root)
        for p in sorted(root.rglob("*"), key=lambda p: p.relative_to(root).as_posix())
        if p.is_file()
    ]
    logger.info(f"Collected {len(files)} files from {root}")
    return files
