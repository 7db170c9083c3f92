"""
Tests for whole-course analysis and the job aid structure.

Uses in-memory source files for most cases and tmp_path folders for the
local-file handles and the command line script.
"""

import asyncio
import json
from datetime import date

import pytest
from pydantic import ValidationError

from rise_extractor.analyzer import CourseAnalyzer, compare_lesson_paths
from rise_extractor.structure import (
    StructureBuilder,
    build_structure,
    format_generated_date,
    REFLECTION_QUESTION,
    REFLECTION_SPACE,
)
from rise_extractor.main import CourseExtractor, extract_course_folder
from rise_extractor.sources import (
    SourceFile,
    MemorySourceFile,
    LocalSourceFile,
    collect_source_files,
    detect_charset_from_bytes,
)
from rise_extractor.schemas import Lesson, ContentBlock, FileRole
from rise_extractor.config import ExtractorConfig
from rise_extractor.exceptions import ConfigurationError, SourceReadError


def rise_page(title: str, body: str = "") -> str:
    return (
        f"<html><head><title>{title}</title></head>"
        f'<body><div class="rise-lesson">{body}</div></body></html>'
    )


PLAIN_PAGE = "<html><head><title>Launcher</title></head><body><p>Hello</p></body></html>"


class BrokenSourceFile(SourceFile):
    """A source whose read fails like an unreadable file."""

    def __init__(self, name: str, error: Exception):
        super().__init__(name, name)
        self.error = error

    async def read_text(self) -> str:
        raise self.error


class GarbledSourceFile(SourceFile):
    """A source whose read succeeds but yields no usable text."""

    def __init__(self, name: str):
        super().__init__(name, name)

    async def read_text(self):
        return None


class SlowSourceFile(MemorySourceFile):
    """A source that takes a while to read."""

    def __init__(self, name: str, text: str, delay: float):
        super().__init__(name, text=text)
        self.delay = delay

    async def read_text(self) -> str:
        await asyncio.sleep(self.delay)
        return await super().read_text()


def make_lesson(title: str, block_types=()) -> Lesson:
    return Lesson(
        path=f"{title}.html",
        file_name=f"{title}.html",
        title=title,
        blocks=[ContentBlock(type=t, content=t) for t in block_types],
        clean_content=f"<p>{title}</p>",
    )


class TestNaturalOrder:

    def test_numbers_compare_numerically(self):
        assert compare_lesson_paths("lesson-2.html", "lesson-10.html") < 0
        assert compare_lesson_paths("lesson-10.html", "lesson-2.html") > 0

    def test_without_numbers_compare_as_strings(self):
        assert compare_lesson_paths("alpha.html", "beta.html") < 0
        assert compare_lesson_paths("beta.html", "alpha.html") > 0

    def test_only_one_number_compares_as_strings(self):
        assert compare_lesson_paths("intro.html", "lesson-1.html") < 0

    def test_first_number_decides(self):
        assert compare_lesson_paths("unit-1/lesson-9.html", "unit-2/lesson-1.html") < 0

    def test_leading_zeros_compare_by_value(self):
        assert compare_lesson_paths("lesson-007.html", "lesson-7.html") == 0
        assert compare_lesson_paths("lesson-010.html", "lesson-9.html") > 0

    def test_very_long_numbers(self):
        huge = "lesson-" + "9" * 5000 + ".html"
        assert compare_lesson_paths(huge, "lesson-2.html") > 0
        assert compare_lesson_paths("lesson-2.html", huge) < 0

    @pytest.mark.asyncio
    async def test_very_long_numbers_in_course(self):
        huge = "lesson-" + "9" * 5000 + ".html"
        files = [
            MemorySourceFile(huge, text=rise_page("Last")),
            MemorySourceFile("lesson-2.html", text=rise_page("First")),
        ]
        analysis = await CourseAnalyzer().analyze_course(files)
        assert [lesson.title for lesson in analysis.lessons] == ["First", "Last"]


class TestCourseAnalyzer:
    """Test whole-course analysis."""

    @pytest.mark.asyncio
    async def test_buckets_and_total_files(self):
        files = [
            MemorySourceFile("index.html", text=PLAIN_PAGE),
            MemorySourceFile("lesson-1.html", "lessons/lesson-1.html", rise_page("One")),
            MemorySourceFile("course.json", "data/course.json", "{}"),
            MemorySourceFile("logo.png", "assets/logo.png"),
            MemorySourceFile("readme.txt"),
        ]
        analysis = await CourseAnalyzer().analyze_course(files)

        assert analysis.total_files == 5
        assert [f.path for f in analysis.html_files] == ["index.html", "lessons/lesson-1.html"]
        assert [f.path for f in analysis.json_files] == ["data/course.json"]
        assert [f.path for f in analysis.media_files] == ["assets/logo.png"]
        assert analysis.main_index.path == "index.html"
        assert analysis.main_index.role == FileRole.HTML

    @pytest.mark.asyncio
    async def test_non_rise_html_counts_but_yields_no_lesson(self):
        files = [
            MemorySourceFile("plain.html", text=PLAIN_PAGE),
            MemorySourceFile("lesson.html", text=rise_page("Real Lesson")),
        ]
        analysis = await CourseAnalyzer().analyze_course(files)

        assert len(analysis.html_files) == 2
        assert [lesson.path for lesson in analysis.lessons] == ["lesson.html"]
        assert analysis.warnings == []

    @pytest.mark.asyncio
    async def test_no_main_index_in_subfolder(self):
        files = [MemorySourceFile("index.html", "scormcontent/index.html", PLAIN_PAGE)]
        analysis = await CourseAnalyzer().analyze_course(files)
        assert analysis.main_index is None

    @pytest.mark.asyncio
    async def test_lessons_sorted_naturally(self):
        files = [
            MemorySourceFile("lesson-10.html", text=rise_page("Ten")),
            MemorySourceFile("lesson-2.html", text=rise_page("Two")),
            MemorySourceFile("lesson-1.html", text=rise_page("One")),
        ]
        analysis = await CourseAnalyzer().analyze_course(files)
        assert [lesson.path for lesson in analysis.lessons] == [
            "lesson-1.html", "lesson-2.html", "lesson-10.html"
        ]

    @pytest.mark.asyncio
    async def test_unreadable_files_are_skipped(self):
        files = [
            BrokenSourceFile("broken-1.html", OSError("permission denied")),
            BrokenSourceFile("broken-2.html", SourceReadError("corrupt", path="broken-2.html")),
            MemorySourceFile("lesson-3.html", text=rise_page("Three")),
        ]
        analysis = await CourseAnalyzer().analyze_course(files)

        assert analysis.total_files == 3
        assert len(analysis.html_files) == 3
        assert [lesson.title for lesson in analysis.lessons] == ["Three"]
        assert len(analysis.warnings) == 2
        assert analysis.warnings[0].startswith("broken-1.html: ")
        assert "permission denied" in analysis.warnings[0]
        assert analysis.warnings[1] == "broken-2.html: corrupt"

    @pytest.mark.asyncio
    async def test_lesson_fields(self):
        body = (
            '<div class="text-block"><p>Welcome aboard</p></div>'
            '<img src="assets/ship.png">'
            '<button class="rise-next">Next</button>'
            '<div class="quiz">Pick one</div>'
        )
        html = rise_page("Onboarding", body).replace(
            "<head>", '<head><meta name="description" content="First day">'
        )
        files = [MemorySourceFile("onboarding.html", "lessons/onboarding.html", html)]
        analysis = await CourseAnalyzer().analyze_course(files)
        lesson = analysis.lessons[0]

        assert lesson.title == "Onboarding"
        assert lesson.file_name == "onboarding.html"
        assert lesson.description == "First day"
        assert [(b.type, b.content) for b in lesson.blocks] == [("text", "Welcome aboard")]
        assert [(m.type, m.src) for m in lesson.media] == [("image", "assets/ship.png")]
        assert [(i.type, i.content) for i in lesson.interactions] == [("button", "Next")]
        assert [(a.type, a.content) for a in lesson.assessments] == [("quiz", "Pick one")]
        assert lesson.metadata["description"] == "First day"
        assert lesson.clean_content.startswith('<div class="rise-lesson">')

    def test_analyze_lesson_rejects_non_rise(self):
        analyzer = CourseAnalyzer()
        classified = analyzer.classifier.classify("plain.html")
        assert analyzer.analyze_lesson(PLAIN_PAGE, classified) is None

    def test_lessons_are_immutable(self):
        lesson = make_lesson("One")
        with pytest.raises(ValidationError):
            lesson.title = "Changed"

    @pytest.mark.asyncio
    async def test_concurrent_reads_keep_deterministic_order(self):
        files = [
            SlowSourceFile("lesson-3.html", rise_page("Three"), delay=0.0),
            SlowSourceFile("lesson-1.html", rise_page("One"), delay=0.03),
            SlowSourceFile("lesson-2.html", rise_page("Two"), delay=0.01),
        ]
        analyzer = CourseAnalyzer(config=ExtractorConfig(concurrent_reads=True))
        analysis = await analyzer.analyze_course(files)
        assert [lesson.title for lesson in analysis.lessons] == ["One", "Two", "Three"]

    @pytest.mark.asyncio
    async def test_soup_scanner_from_config(self):
        body = '<div class="text-block"><div>a</div> b</div>'
        files = [MemorySourceFile("lesson.html", text=rise_page("Nested", body))]

        regex_lesson = (await CourseAnalyzer().analyze_course(files)).lessons[0]
        soup_analyzer = CourseAnalyzer(config=ExtractorConfig(scanner="soup"))
        soup_lesson = (await soup_analyzer.analyze_course(files)).lessons[0]

        assert regex_lesson.blocks[0].content == "a"
        assert soup_lesson.blocks[0].content == "a b"

    @pytest.mark.asyncio
    async def test_dedupe_media_from_config(self):
        body = '<img src="a.png"><img src="a.png">'
        files = [MemorySourceFile("lesson.html", text=rise_page("Media", body))]
        analyzer = CourseAnalyzer(config=ExtractorConfig(dedupe_media=True))
        analysis = await analyzer.analyze_course(files)
        assert len(analysis.lessons[0].media) == 1

    def test_sync_wrapper(self):
        files = [MemorySourceFile("lesson.html", text=rise_page("Sync"))]
        analysis = CourseAnalyzer().analyze_course_sync(files)
        assert analysis.lessons[0].title == "Sync"

    @pytest.mark.asyncio
    async def test_last_root_index_wins(self):
        files = [
            MemorySourceFile("INDEX.HTML", text=PLAIN_PAGE),
            MemorySourceFile("index.html", text=PLAIN_PAGE),
        ]
        analysis = await CourseAnalyzer().analyze_course(files)
        assert analysis.main_index.name == "index.html"

    @pytest.mark.asyncio
    async def test_unanalyzable_lesson_is_skipped(self):
        files = [
            GarbledSourceFile("garbled.html"),
            MemorySourceFile("lesson-2.html", text=rise_page("Two")),
        ]
        analysis = await CourseAnalyzer().analyze_course(files)

        assert [lesson.title for lesson in analysis.lessons] == ["Two"]
        assert len(analysis.warnings) == 1
        assert analysis.warnings[0].startswith("garbled.html: Analysis failed")

    @pytest.mark.asyncio
    async def test_buckets_keep_source_handles(self):
        course_json = MemorySourceFile("course.json", "data/course.json", '{"lessons": []}')
        logo = MemorySourceFile("logo.png", "assets/logo.png")
        analysis = await CourseAnalyzer().analyze_course([course_json, logo])

        assert analysis.json_files[0].source is course_json
        assert analysis.media_files[0].source is logo
        assert await analysis.json_files[0].source.read_text() == '{"lessons": []}'

    @pytest.mark.asyncio
    async def test_serialized_analysis_uses_camel_case(self):
        body = '<div class="text-block"><p>Hi</p></div>'
        files = [MemorySourceFile("index.html", text=rise_page("One", body))]
        analysis = await CourseAnalyzer().analyze_course(files)
        data = analysis.model_dump(mode="json", by_alias=True)

        assert set(data["htmlFiles"][0]) == {"name", "path", "role", "isMainIndex"}
        assert data["mainIndex"]["isMainIndex"] is True
        lesson = data["lessons"][0]
        assert lesson["fileName"] == "index.html"
        assert "cleanContent" in lesson
        assert "clean_content" not in lesson
        assert set(lesson["blocks"][0]) == {"type", "content", "rawHtml"}

    @pytest.mark.asyncio
    async def test_empty_course(self):
        analysis = await CourseAnalyzer().analyze_course([])
        assert analysis.total_files == 0
        assert analysis.lessons == []
        assert analysis.main_index is None


class TestStructureBuilder:
    """Test the renderer structure."""

    def test_page_numbers_reserve_cover(self):
        lessons = [make_lesson("One"), make_lesson("Two"), make_lesson("Three")]
        structure = StructureBuilder().build(lessons)
        assert [entry.page for entry in structure.table_of_contents] == [2, 3, 4]

    def test_toc_lists_block_types_in_order(self):
        lessons = [make_lesson("One", ["text", "image", "text"]), make_lesson("Two")]
        structure = StructureBuilder().build(lessons)
        assert structure.table_of_contents[0].sections == ["text", "image", "text"]
        assert structure.table_of_contents[1].sections == []

    def test_defaults(self):
        structure = build_structure([])
        assert structure.title == "Rise Course Job Aid"
        assert structure.author == "Course Author"
        assert structure.table_of_contents == []
        assert structure.sections == []

    def test_overrides(self):
        structure = build_structure([], {"title": "Safety 101", "author": "EHS"})
        assert structure.title == "Safety 101"
        assert structure.author == "EHS"

    def test_empty_overrides_fall_back(self):
        structure = build_structure([], {"title": "", "author": None})
        assert structure.title == "Rise Course Job Aid"
        assert structure.author == "Course Author"

    def test_generated_date(self):
        structure = StructureBuilder().build([], generated_on=date(2026, 3, 7))
        assert structure.generated == "3/7/2026"
        assert format_generated_date(date(2026, 12, 25)) == "12/25/2026"

    def test_sections(self):
        lesson = make_lesson("One", ["text"])
        section = StructureBuilder().build([lesson]).sections[0]
        assert section.title == "One"
        assert section.content == "<p>One</p>"
        assert section.reflection.question == REFLECTION_QUESTION
        assert section.reflection.space == REFLECTION_SPACE

    def test_serialized_shape(self):
        structure = StructureBuilder().build([make_lesson("One", ["text"])])
        data = structure.model_dump(mode="json", by_alias=True)

        assert set(data) == {"title", "author", "generated", "tableOfContents", "sections"}
        assert set(data["tableOfContents"][0]) == {"title", "page", "sections"}
        assert set(data["sections"][0]) == {
            "title", "description", "content", "interactions",
            "assessments", "media", "reflection",
        }
        assert set(data["sections"][0]["reflection"]) == {"question", "space"}


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_single_lesson(self):
        body = '<div class="text-block"><p>Intro text</p></div><img src="assets/a.png">'
        files = [
            MemorySourceFile("index.html", text=PLAIN_PAGE),
            MemorySourceFile("lesson-1.html", "lessons/lesson-1.html", rise_page("Lesson One", body)),
        ]
        extractor = CourseExtractor(ExtractorConfig())
        structure = await extractor.extract(files)

        assert len(structure.sections) == 1
        assert len(structure.sections[0].media) == 1
        assert structure.table_of_contents[0].sections == ["text"]
        assert structure.table_of_contents[0].title == "Lesson One"
        assert structure.table_of_contents[0].page == 2

    def test_course_folder(self, tmp_path):
        lessons = tmp_path / "lessons"
        lessons.mkdir()
        (tmp_path / "index.html").write_text(PLAIN_PAGE)
        (lessons / "lesson-10.html").write_text(rise_page("Ten"))
        (lessons / "lesson-2.html").write_text(rise_page("Two"))

        structure = extract_course_folder(tmp_path, {"title": "Folder Course"}, ExtractorConfig())

        assert structure.title == "Folder Course"
        assert [entry.title for entry in structure.table_of_contents] == ["Two", "Ten"]


class TestSources:
    """Test local and in-memory file handles."""

    def test_detect_charset(self):
        assert detect_charset_from_bytes(b'<meta charset="utf-8">') == "utf-8"
        assert detect_charset_from_bytes(b'<meta charset="ISO-8859-1">') == "windows-1252"
        assert detect_charset_from_bytes(
            b'<meta http-equiv="Content-Type" content="text/html; charset=latin1">'
        ) == "windows-1252"
        assert detect_charset_from_bytes(b"<p>no declaration</p>") == "utf-8"

    @pytest.mark.asyncio
    async def test_local_file_uses_declared_charset(self, tmp_path):
        path = tmp_path / "lesson.html"
        path.write_bytes(b'<meta charset="iso-8859-1"><p>caf\xe9</p>')
        text = await LocalSourceFile(path, tmp_path).read_text()
        assert "café" in text

    @pytest.mark.asyncio
    async def test_missing_local_file(self, tmp_path):
        handle = LocalSourceFile(tmp_path / "gone.html", tmp_path)
        with pytest.raises(SourceReadError) as exc_info:
            await handle.read_text()
        assert exc_info.value.path == "gone.html"

    def test_collect_source_files(self, tmp_path):
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "lesson.html").write_text("x")
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "index.html").write_text("x")

        files = collect_source_files(tmp_path)
        assert [f.relative_path for f in files] == ["a.json", "b/lesson.html", "index.html"]
        assert [f.name for f in files] == ["a.json", "lesson.html", "index.html"]

    def test_collect_missing_folder(self, tmp_path):
        with pytest.raises(SourceReadError):
            collect_source_files(tmp_path / "missing")

    def test_memory_file_defaults_path_to_name(self):
        assert MemorySourceFile("lesson.html").relative_path == "lesson.html"


class TestConfig:

    def test_defaults(self):
        config = ExtractorConfig()
        assert config.scanner == "regex"
        assert config.dedupe_media is False
        assert "rise-block" in config.markers

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RISE_EXTRACTOR_SCANNER", "SOUP")
        monkeypatch.setenv("RISE_EXTRACTOR_DEDUPE_MEDIA", "yes")
        monkeypatch.setenv("RISE_EXTRACTOR_MARKERS", "rise-block, my-tool")
        monkeypatch.setenv("RISE_EXTRACTOR_LOG_LEVEL", "debug")

        config = ExtractorConfig.from_env()
        assert config.scanner == "soup"
        assert config.dedupe_media is True
        assert config.markers == ["rise-block", "my-tool"]
        assert config.log_level == 10

    def test_overrides_win_over_env(self, monkeypatch):
        monkeypatch.setenv("RISE_EXTRACTOR_SCANNER", "soup")
        assert ExtractorConfig.from_env(scanner="regex").scanner == "regex"

    def test_invalid_scanner(self, monkeypatch):
        monkeypatch.setenv("RISE_EXTRACTOR_SCANNER", "dom")
        with pytest.raises(ConfigurationError):
            ExtractorConfig.from_env()

    def test_invalid_bool(self, monkeypatch):
        monkeypatch.setenv("RISE_EXTRACTOR_CONCURRENT_READS", "maybe")
        with pytest.raises(ConfigurationError):
            ExtractorConfig.from_env()

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("RISE_EXTRACTOR_LOG_LEVEL", "chatty")
        with pytest.raises(ConfigurationError):
            ExtractorConfig.from_env()


class TestCommandLine:

    def test_prints_structure(self, tmp_path, monkeypatch, capsys):
        import run_course_extractor

        (tmp_path / "lesson-1.html").write_text(rise_page("One"))
        monkeypatch.setattr(
            "sys.argv",
            ["run_course_extractor.py", str(tmp_path), "--title", "CLI Course"]
        )
        run_course_extractor.main()

        data = json.loads(capsys.readouterr().out)
        assert data["title"] == "CLI Course"
        assert [entry["page"] for entry in data["tableOfContents"]] == [2]

    def test_analysis_only(self, tmp_path, monkeypatch, capsys):
        import run_course_extractor

        (tmp_path / "lesson-1.html").write_text(rise_page("One"))
        (tmp_path / "notes.txt").write_text("x")
        monkeypatch.setattr(
            "sys.argv",
            ["run_course_extractor.py", str(tmp_path), "--analysis-only"]
        )
        run_course_extractor.main()

        data = json.loads(capsys.readouterr().out)
        assert data["totalFiles"] == 2
        assert data["lessons"][0]["title"] == "One"

    def test_missing_folder_exits(self, tmp_path, monkeypatch):
        import run_course_extractor

        monkeypatch.setattr(
            "sys.argv",
            ["run_course_extractor.py", str(tmp_path / "missing")]
        )
        with pytest.raises(SystemExit) as exc_info:
            run_course_extractor.main()
        assert exc_info.value.code == 1
