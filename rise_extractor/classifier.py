"""
File classification for exported course folders.

Every input file gets exactly one role from its extension. The course's
main index is the root-level ``index.html``.
"""

from typing import Optional

from .schemas import ClassifiedFile, FileRole
from .sources import SourceFile
from .logger import get_module_logger

logger = get_module_logger("classifier")

HTML_EXTENSIONS = ('.html', '.htm')
JSON_EXTENSIONS = ('.json',)
MEDIA_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.svg', '.mp4', '.mp3', '.wav', '.pdf')

MAIN_INDEX_NAME = "index.html"


class FileClassifier:
    """Assigns roles to course files and spots the main index."""

    def role_for(self, name: str) -> FileRole:
        lowered = name.lower()
        if lowered.endswith(HTML_EXTENSIONS):
            return FileRole.HTML
        if lowered.endswith(JSON_EXTENSIONS):
            return FileRole.JSON
        if lowered.endswith(MEDIA_EXTENSIONS):
            return FileRole.MEDIA
        return FileRole.UNKNOWN

    def is_main_index(self, name: str, relative_path: str) -> bool:
        """True for ``index.html`` (any case) sitting at the folder root."""
        at_root = '/' not in relative_path and '\\' not in relative_path
        return name.lower() == MAIN_INDEX_NAME and at_root

    def classify(
        self,
        name: str,
        relative_path: Optional[str] = None,
        source: Optional[SourceFile] = None
    ) -> ClassifiedFile:
        path = relative_path or name
        return ClassifiedFile(
            name=name,
            path=path,
            role=self.role_for(name),
            is_main_index=self.is_main_index(name, path),
            source=source,
        )


def classify(name: str, relative_path: Optional[str] = None) -> ClassifiedFile:
    """Convenience function to classify a single file."""
    return FileClassifier().classify(name, relative_path)
