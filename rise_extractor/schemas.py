"""
Pydantic schemas defining the contracts between pipeline stages.

Data flow through the pipeline:
  SourceFile → FileClassifier → ClassifiedFile buckets
  HTML text → field/block extractors + sanitizer → Lesson
  Lessons → CourseAnalysis → StructureBuilder → DocumentStructure

DocumentStructure is consumed by an external renderer, so its serialized
field names are fixed; always dump it with ``model_dump(by_alias=True)``.
"""

from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from .sources import SourceFile


class FileRole(str, Enum):
    """Role assigned to every input file by the classifier."""
    HTML = "html"
    JSON = "json"
    MEDIA = "media"
    UNKNOWN = "unknown"


BlockType = Literal["text", "image", "video", "audio"]
InteractionType = Literal["button", "accordion", "tab", "popup"]
AssessmentType = Literal["quiz", "question", "knowledge-check"]
MediaType = Literal["image", "video", "audio"]


class ClassifiedFile(BaseModel):
    """An input file after classification. Never changes afterwards."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    name: str
    path: str                   # Relative path, "/"-separated; root files have none
    role: FileRole
    is_main_index: bool = Field(default=False, alias="isMainIndex")
    # Handle the file was classified from, so callers can still read JSON
    # or media files after analysis; never serialized
    source: Optional[SourceFile] = Field(default=None, exclude=True, repr=False)


# --- Extracted records ---
# None of these carry an identity: their position in the owning Lesson's
# list is extraction order (pattern order first, then left to right).

class ContentBlock(BaseModel):
    """A Rise content block (text/image/video/audio div region)."""
    model_config = ConfigDict(populate_by_name=True)

    type: BlockType
    content: str = Field(description="Cleaned inner text of the block")
    raw_html: str = Field(default="", alias="rawHtml", description="Matched markup span")


class Interaction(BaseModel):
    """An interactive widget: button, accordion, tab or popup."""
    type: InteractionType
    content: str


class Assessment(BaseModel):
    """A quiz, question or knowledge-check region."""
    type: AssessmentType
    content: str


class MediaReference(BaseModel):
    """
    A media element's source locator.

    Media nested inside a content block is captured here as well as in the
    block's text; the two collections are scanned independently.
    """
    type: MediaType
    src: str
    element: str = ""    # The matched <img>/<video>/<audio> opening tag


class Lesson(BaseModel):
    """One analyzed Rise lesson. Only built for confirmed Rise content."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    file_name: str = Field(alias="fileName")
    title: str
    description: str = ""
    blocks: list[ContentBlock] = Field(default_factory=list)
    interactions: list[Interaction] = Field(default_factory=list)
    assessments: list[Assessment] = Field(default_factory=list)
    media: list[MediaReference] = Field(default_factory=list)
    clean_content: str = Field(default="", alias="cleanContent")
    metadata: dict[str, str] = Field(default_factory=dict)


class CourseAnalysis(BaseModel):
    """Whole-course result of one analysis run."""
    model_config = ConfigDict(populate_by_name=True)

    total_files: int = Field(alias="totalFiles")
    html_files: list[ClassifiedFile] = Field(default_factory=list, alias="htmlFiles")
    json_files: list[ClassifiedFile] = Field(default_factory=list, alias="jsonFiles")
    media_files: list[ClassifiedFile] = Field(default_factory=list, alias="mediaFiles")
    main_index: Optional[ClassifiedFile] = Field(default=None, alias="mainIndex")
    lessons: list[Lesson] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)  # One line per skipped file


# --- Renderer contract ---

class StructureOptions(BaseModel):
    """Cover overrides for the job aid. Empty values mean "use the default"."""
    title: Optional[str] = None
    author: Optional[str] = None


class TocEntry(BaseModel):
    title: str
    page: int
    sections: list[str] = Field(default_factory=list)   # Block types, in order


class Reflection(BaseModel):
    question: str
    space: str


class Section(BaseModel):
    title: str
    description: str
    content: str
    interactions: list[Interaction] = Field(default_factory=list)
    assessments: list[Assessment] = Field(default_factory=list)
    media: list[MediaReference] = Field(default_factory=list)
    reflection: Reflection


class DocumentStructure(BaseModel):
    """Read-only projection of a course handed to the job aid renderer."""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    author: str
    generated: str
    table_of_contents: list[TocEntry] = Field(default_factory=list, alias="tableOfContents")
    sections: list[Section] = Field(default_factory=list)
