#!/usr/bin/env python3
"""
Command-line script to extract a job aid structure from a Rise course.

Point it at an unzipped Rise export; it prints the structure the job aid
renderer consumes (or the full course analysis with --analysis-only).

Usage:
    python run_course_extractor.py ./my-course
    python run_course_extractor.py ./my-course -o job_aid.json --title "Safety 101"
    python run_course_extractor.py ./my-course --analysis-only --scanner soup

Settings can also come from RISE_EXTRACTOR_* variables or a .env file.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Load .env file automatically
from dotenv import load_dotenv
load_dotenv()

from rise_extractor.config import ExtractorConfig
from rise_extractor.exceptions import RiseExtractorError
from rise_extractor.main import CourseExtractor
from rise_extractor.sources import collect_source_files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract lesson content from an unzipped Rise course"
    )
    parser.add_argument("folder", help="Unzipped course folder")
    parser.add_argument("--output", "-o", help="Output JSON file (default: stdout)")
    parser.add_argument("--title", help="Job aid cover title")
    parser.add_argument("--author", help="Job aid cover author")
    parser.add_argument(
        "--analysis-only",
        action="store_true",
        help="Print the course analysis instead of the job aid structure"
    )
    parser.add_argument(
        "--scanner",
        choices=["regex", "soup"],
        help="Region scanner (default: regex, or RISE_EXTRACTOR_SCANNER)"
    )
    parser.add_argument(
        "--dedupe-media",
        action="store_true",
        default=None,
        help="Drop repeated media references within a lesson"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


async def run(args) -> dict:
    config = ExtractorConfig.from_env(
        scanner=args.scanner,
        dedupe_media=args.dedupe_media,
        log_level=logging.DEBUG if args.verbose else None,
    )
    extractor = CourseExtractor(config)
    files = collect_source_files(args.folder)

    if args.analysis_only:
        analysis = await extractor.analyze(files)
        return analysis.model_dump(mode="json", by_alias=True)

    structure = await extractor.extract(files, {"title": args.title, "author": args.author})
    return structure.model_dump(mode="json", by_alias=True)


def main():
    args = build_parser().parse_args()

    try:
        result = asyncio.run(run(args))
    except RiseExtractorError as e:
        print(f"✗ Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    # ensure_ascii=False preserves unicode characters in the JSON
    output = json.dumps(result, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Saved to: {args.output}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
