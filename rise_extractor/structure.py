"""
Job aid structure builder.

Projects an ordered list of lessons onto the structure the renderer draws:
cover metadata, a table of contents and one section per lesson. Always
succeeds; lessons without blocks or interactions get empty lists.
"""

from datetime import date
from typing import Optional, Sequence, Union

from .schemas import (
    DocumentStructure, Lesson, Reflection, Section, StructureOptions, TocEntry
)

DEFAULT_TITLE = "Rise Course Job Aid"
DEFAULT_AUTHOR = "Course Author"

REFLECTION_QUESTION = "What are the key takeaways from this lesson?"
REFLECTION_SPACE = "Use this area to write your notes and action items."

# Page 1 is the cover
FIRST_LESSON_PAGE = 2


def format_generated_date(day: date) -> str:
    """US short date without zero padding, e.g. 3/7/2026."""
    return f"{day.month}/{day.day}/{day.year}"


class StructureBuilder:
    """Builds the DocumentStructure for a course's lessons."""

    def build(
        self,
        lessons: Sequence[Lesson],
        options: Union[StructureOptions, dict, None] = None,
        generated_on: Optional[date] = None
    ) -> DocumentStructure:
        if options is None:
            options = StructureOptions()
        elif isinstance(options, dict):
            options = StructureOptions(**options)

        table_of_contents = [
            TocEntry(
                title=lesson.title,
                page=index + FIRST_LESSON_PAGE,
                sections=[block.type for block in lesson.blocks],
            )
            for index, lesson in enumerate(lessons)
        ]

        sections = [
            Section(
                title=lesson.title,
                description=lesson.description,
                content=lesson.clean_content,
                interactions=list(lesson.interactions),
                assessments=list(lesson.assessments),
                media=list(lesson.media),
                reflection=Reflection(question=REFLECTION_QUESTION, space=REFLECTION_SPACE),
            )
            for lesson in lessons
        ]

        return DocumentStructure(
            title=options.title or DEFAULT_TITLE,
            author=options.author or DEFAULT_AUTHOR,
            generated=format_generated_date(generated_on or date.today()),
            table_of_contents=table_of_contents,
            sections=sections,
        )


def build_structure(
    lessons: Sequence[Lesson],
    options: Union[StructureOptions, dict, None] = None
) -> DocumentStructure:
    """Convenience function to build a job aid structure."""
    return StructureBuilder().build(lessons, options)
