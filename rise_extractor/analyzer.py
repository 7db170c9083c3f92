"""
Course analyzer: turns a folder's worth of files into a CourseAnalysis.

Pipeline per HTML file:
  read text → MarkerDetector gate → fields + blocks + sanitizer → Lesson

Error philosophy: a file that cannot be read or analyzed is logged, noted
in CourseAnalysis.warnings and skipped. Nothing raised for one file stops
the rest of the course, and analyze_course itself never raises for file
content.
"""

import asyncio
import re
from functools import cmp_to_key
from typing import Optional, Sequence, Union

from .schemas import ClassifiedFile, CourseAnalysis, FileRole, Lesson
from .sources import SourceFile
from .classifier import FileClassifier
from .markers import MarkerDetector
from .blocks import BlockExtractor
from .sanitizer import ContentSanitizer
from .scanner import create_scanner
from .fields import extract_title, extract_description, extract_metadata
from .config import ExtractorConfig
from .exceptions import FileAnalysisError, SourceReadError, LessonAnalysisError
from .logger import get_module_logger

logger = get_module_logger("analyzer")

DIGITS_PATTERN = re.compile(r'\d+', re.ASCII)


def _numeric_key(run: str) -> tuple[int, str]:
    # Compared as text: int() refuses very long digit runs
    digits = run.lstrip('0')
    return len(digits), digits


def compare_lesson_paths(a: str, b: str) -> int:
    """
    Natural order for lesson paths.

    When both paths contain a number, the first number in each decides
    ("lesson-2" before "lesson-10"); otherwise plain string order.
    """
    a_num = DIGITS_PATTERN.search(a)
    b_num = DIGITS_PATTERN.search(b)

    if a_num and b_num:
        a_key = _numeric_key(a_num.group(0))
        b_key = _numeric_key(b_num.group(0))
        return (a_key > b_key) - (a_key < b_key)

    return (a > b) - (a < b)


def sort_lessons(lessons: Sequence[Lesson]) -> list[Lesson]:
    # sorted() is stable: equal numbers keep input order
    return sorted(lessons, key=cmp_to_key(lambda x, y: compare_lesson_paths(x.path, y.path)))


class CourseAnalyzer:
    """Analyzes an exported Rise course."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        classifier: Optional[FileClassifier] = None,
        detector: Optional[MarkerDetector] = None,
        block_extractor: Optional[BlockExtractor] = None,
        sanitizer: Optional[ContentSanitizer] = None
    ):
        self.config = config or ExtractorConfig()
        self.classifier = classifier or FileClassifier()
        self.detector = detector or MarkerDetector(self.config.markers)
        self.block_extractor = block_extractor or BlockExtractor(
            scanner=create_scanner(self.config.scanner),
            dedupe_media=self.config.dedupe_media
        )
        self.sanitizer = sanitizer or ContentSanitizer()

    def analyze_lesson(self, content: str, file: ClassifiedFile) -> Optional[Lesson]:
        """
        Analyze one lesson document.

        Returns:
            The Lesson, or None when the document is not Rise content
        """
        if not self.detector.is_rise_content(content):
            logger.debug(f"No Rise markers in {file.path}, skipping")
            return None

        return Lesson(
            path=file.path,
            file_name=file.name,
            title=extract_title(content, file.name),
            description=extract_description(content),
            blocks=self.block_extractor.extract_blocks(content),
            interactions=self.block_extractor.extract_interactions(content),
            assessments=self.block_extractor.extract_assessments(content),
            media=self.block_extractor.extract_media(content),
            clean_content=self.sanitizer.sanitize(content),
            metadata=extract_metadata(content),
        )

    async def _read(self, source: SourceFile) -> Union[str, SourceReadError]:
        """Read a file's text, returning the error instead of raising it."""
        try:
            return await source.read_text()
        except SourceReadError as e:
            return e
        except Exception as e:
            return SourceReadError(f"Could not read file: {e}", path=source.relative_path)

    def _analyze_file(self, content: str, file: ClassifiedFile) -> Optional[Lesson]:
        try:
            return self.analyze_lesson(content, file)
        except Exception as e:
            raise LessonAnalysisError(
                f"Analysis failed: {e}",
                path=file.path,
                details={"error_type": type(e).__name__}
            ) from e

    async def analyze_course(self, files: Sequence[SourceFile]) -> CourseAnalysis:
        """
        Classify every file and analyze each HTML file as a potential lesson.

        Args:
            files: Course file handles, in input order

        Returns:
            CourseAnalysis with lessons in natural path order
        """
        logger.info(f"Analyzing course: {len(files)} files")

        buckets = {FileRole.HTML: [], FileRole.JSON: [], FileRole.MEDIA: []}
        main_index = None
        html_sources = []

        for source in files:
            classified = self.classifier.classify(source.name, source.relative_path, source)

            if classified.role in buckets:
                buckets[classified.role].append(classified)
            if classified.role == FileRole.HTML:
                html_sources.append((source, classified))

            if classified.is_main_index:
                if main_index is not None:
                    # Several root index files: the last one wins
                    logger.debug(f"Main index {main_index.path} replaced by {classified.path}")
                main_index = classified

        # Reads may be gathered, but content is always processed in input
        # order and the lessons are sorted afterwards.
        if self.config.concurrent_reads:
            texts = await asyncio.gather(*(self._read(src) for src, _ in html_sources))
        else:
            texts = [await self._read(src) for src, _ in html_sources]

        lessons = []
        warnings = []

        for (_, classified), text in zip(html_sources, texts):
            try:
                if isinstance(text, SourceReadError):
                    raise text
                lesson = self._analyze_file(text, classified)
            except FileAnalysisError as e:
                logger.warning(f"Error analyzing {e.path}: {e.message}")
                warnings.append(e.to_warning())
                continue

            if lesson is not None:
                lessons.append(lesson)

        lessons = sort_lessons(lessons)
        logger.info(
            f"Analysis complete: {len(lessons)} lessons from "
            f"{len(buckets[FileRole.HTML])} HTML files"
        )

        return CourseAnalysis(
            total_files=len(files),
            html_files=buckets[FileRole.HTML],
            json_files=buckets[FileRole.JSON],
            media_files=buckets[FileRole.MEDIA],
            main_index=main_index,
            lessons=lessons,
            warnings=warnings,
        )

    def analyze_course_sync(self, files: Sequence[SourceFile]) -> CourseAnalysis:
        """Run analyze_course to completion outside of an event loop."""
        return asyncio.run(self.analyze_course(files))
