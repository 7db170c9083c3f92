"""
Rise Content Extractor

Extracts lesson content from unzipped Articulate Rise course exports and
shapes it for a job aid renderer.
- Classifier/Markers: find the files that hold Rise lessons
- Extractors: pattern-based fields, blocks, interactions, assessments, media
- Sanitizer: presentation-safe lesson content
- Analyzer/Structure: whole-course analysis and the renderer structure

Public API surface:
  Pipeline classes — CourseExtractor, CourseAnalyzer, StructureBuilder
  Input handles    — SourceFile, LocalSourceFile, MemorySourceFile
  Data models      — Lesson, CourseAnalysis, DocumentStructure, ...
  Error types      — SourceReadError, LessonAnalysisError (recovered),
                     ConfigurationError (fatal)
"""

# --- Pipeline stage classes ---
from .main import CourseExtractor, analyze_course_folder, extract_course_folder
from .analyzer import CourseAnalyzer
from .structure import StructureBuilder
from .classifier import FileClassifier
from .markers import MarkerDetector
from .blocks import BlockExtractor
from .sanitizer import ContentSanitizer
from .scanner import TextRegionScanner, RegexRegionScanner, SoupRegionScanner

# --- Input handles ---
from .sources import SourceFile, LocalSourceFile, MemorySourceFile, collect_source_files

# --- Data models ---
from .schemas import (
    FileRole,
    ClassifiedFile,
    ContentBlock,
    Interaction,
    Assessment,
    MediaReference,
    Lesson,
    CourseAnalysis,
    StructureOptions,
    DocumentStructure,
)

# --- Configuration and errors ---
from .config import ExtractorConfig
from .exceptions import (
    RiseExtractorError,
    ConfigurationError,
    SourceReadError,
    LessonAnalysisError,
)

__version__ = "0.1.0"
__all__ = [
    "CourseExtractor",
    "analyze_course_folder",
    "extract_course_folder",
    "CourseAnalyzer",
    "StructureBuilder",
    "FileClassifier",
    "MarkerDetector",
    "BlockExtractor",
    "ContentSanitizer",
    "TextRegionScanner",
    "RegexRegionScanner",
    "SoupRegionScanner",
    "SourceFile",
    "LocalSourceFile",
    "MemorySourceFile",
    "collect_source_files",
    "FileRole",
    "ClassifiedFile",
    "ContentBlock",
    "Interaction",
    "Assessment",
    "MediaReference",
    "Lesson",
    "CourseAnalysis",
    "StructureOptions",
    "DocumentStructure",
    "ExtractorConfig",
    "RiseExtractorError",
    "ConfigurationError",
    "SourceReadError",
    "LessonAnalysisError",
]
