"""
Main orchestrator for the Rise content extractor.

Coordinates the two stages: CourseAnalyzer → StructureBuilder. Folder
input is turned into LocalSourceFile handles first.
"""

import asyncio
from pathlib import Path
from typing import Optional, Sequence, Union

from .analyzer import CourseAnalyzer
from .structure import StructureBuilder
from .sources import SourceFile, collect_source_files
from .schemas import CourseAnalysis, DocumentStructure, StructureOptions
from .config import ExtractorConfig, load_config
from .logger import get_module_logger, setup_logger

logger = get_module_logger("main")


class CourseExtractor:
    """
    Main orchestrator for course extraction.

    1. CourseAnalyzer: classifies files and builds lessons
    2. StructureBuilder: projects lessons onto the job aid structure
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = load_config(config)
        setup_logger(level=self.config.log_level)

        self.analyzer = CourseAnalyzer(config=self.config)
        self.builder = StructureBuilder()

        logger.info(f"CourseExtractor initialized (scanner={self.config.scanner})")

    async def analyze(self, files: Sequence[SourceFile]) -> CourseAnalysis:
        return await self.analyzer.analyze_course(files)

    async def extract(
        self,
        files: Sequence[SourceFile],
        options: Union[StructureOptions, dict, None] = None
    ) -> DocumentStructure:
        """
        Analyze course files and build the job aid structure.

        Args:
            files: Course file handles
            options: Cover title/author overrides

        Returns:
            DocumentStructure for the renderer
        """
        analysis = await self.analyze(files)
        structure = self.builder.build(analysis.lessons, options)
        logger.info(f"Complete: {len(structure.sections)} sections")
        return structure

    async def extract_folder(
        self,
        folder: Union[str, Path],
        options: Union[StructureOptions, dict, None] = None
    ) -> DocumentStructure:
        """Extract the job aid structure from an unzipped course folder."""
        return await self.extract(collect_source_files(folder), options)


def analyze_course_folder(
    folder: Union[str, Path],
    config: Optional[ExtractorConfig] = None
) -> CourseAnalysis:
    """Convenience function to analyze an unzipped course folder."""
    extractor = CourseExtractor(config)
    return asyncio.run(extractor.analyze(collect_source_files(folder)))


def extract_course_folder(
    folder: Union[str, Path],
    options: Union[StructureOptions, dict, None] = None,
    config: Optional[ExtractorConfig] = None
) -> DocumentStructure:
    """Convenience function to build the job aid structure for a course folder."""
    return asyncio.run(CourseExtractor(config).extract_folder(folder, options))
