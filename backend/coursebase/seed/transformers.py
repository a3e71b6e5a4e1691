"""
Row transformers: one raw export row plus its resolved parent id in, one
insert-ready record out.

Transformers never raise on bad data. Blank or malformed fields fall back
to the defaults below so a messy spreadsheet row still produces a record.
"""
from __future__ import annotations

from typing import Callable

from coursebase.models import RESOURCE_STATUSES, RESOURCE_TYPES
from coursebase.schemas import ChunkIn, CourseIn, ExerciseIn, ResourceIn, UnitIn
from coursebase.seed import columns as col
from coursebase.seed.normalizers import clean_text, generate_slug, parse_integer, parse_year

DEFAULT_COURSE_STATUS = "Active"
DEFAULT_RESOURCE_TYPE = "Article"
DEFAULT_RESOURCE_STATUS = "Core"
DEFAULT_EXERCISE_TYPE = "Free text"
DEFAULT_ORDER = 1


def _contains_any(*needles: str) -> Callable[[str], bool]:
    def _match(url: str) -> bool:
        return any(n in url for n in needles)

    return _match


# First match wins. URLs are lowercased before matching.
RESOURCE_TYPE_RULES: tuple[tuple[Callable[[str], bool], str], ...] = (
    (_contains_any(".pdf"), "Paper"),
    (_contains_any("substack.com", "blog.", "/blog/", "medium.com", "oneusefulthing.org"), "Blog"),
    (_contains_any("youtube.com", "vimeo.com"), "Website"),
    (
        _contains_any("openai.com", "anthropic.com", ".edu", "rand.org", "cnas.org", "futureoflife.org"),
        "Article",
    ),
)


def _order(raw: str | None) -> int:
    value = parse_integer(raw)
    return DEFAULT_ORDER if value is None else value


def infer_resource_type(url: str | None) -> str:
    lowered = str(url or "").lower()
    if not lowered:
        return DEFAULT_RESOURCE_TYPE
    for predicate, resource_type in RESOURCE_TYPE_RULES:
        if predicate(lowered):
            return resource_type
    return DEFAULT_RESOURCE_TYPE


def resolve_resource_type(raw_type: str | None, url: str | None) -> str:
    declared = clean_text(raw_type)
    if declared in RESOURCE_TYPES:
        return declared
    if declared is None:
        return infer_resource_type(url)
    return DEFAULT_RESOURCE_TYPE


def resolve_resource_status(raw_status: str | None) -> str:
    declared = clean_text(raw_status)
    if declared in RESOURCE_STATUSES:
        return declared
    return DEFAULT_RESOURCE_STATUS


def resolve_course_status(_raw_status: str | None) -> str:
    # Single-status domain: every course is stored as Active whatever the export says.
    return DEFAULT_COURSE_STATUS


def transform_course(row: dict[str, str]) -> CourseIn:
    name = clean_text(row.get(col.COURSE_NAME)) or "Untitled Course"
    return CourseIn(
        name=name,
        slug=clean_text(row.get(col.COURSE_SLUG)) or generate_slug(name),
        description=clean_text(row.get(col.COURSE_DESCRIPTION)),
        status=resolve_course_status(row.get(col.COURSE_STATUS)),
    )


def transform_unit(row: dict[str, str], course_id: str) -> UnitIn:
    return UnitIn(
        course_id=course_id,
        title=clean_text(row.get(col.UNIT_TOPIC)) or "Untitled Unit",
        order=_order(row.get(col.UNIT_ORDER)),
        duration=parse_integer(row.get(col.UNIT_DURATION)),
    )


def transform_chunk(row: dict[str, str], unit_id: str) -> ChunkIn:
    return ChunkIn(
        unit_id=unit_id,
        title=clean_text(row.get(col.CHUNK_TITLE)) or "Untitled Chunk",
        content=clean_text(row.get(col.CHUNK_CONTENT)),
        order=_order(row.get(col.CHUNK_ORDER)),
        time_minutes=parse_integer(row.get(col.CHUNK_TIME)),
    )


def transform_resource(row: dict[str, str], chunk_id: str) -> ResourceIn:
    url = clean_text(row.get(col.RESOURCE_URL)) or ""
    return ResourceIn(
        chunk_id=chunk_id,
        title=clean_text(row.get(col.RESOURCE_NAME)) or "Untitled Resource",
        url=url,
        author=clean_text(row.get(col.RESOURCE_AUTHORS)),
        year=parse_year(row.get(col.RESOURCE_YEAR)),
        type=resolve_resource_type(row.get(col.RESOURCE_TYPE), url),
        time_minutes=parse_integer(row.get(col.RESOURCE_TIME)),
        description=clean_text(row.get(col.RESOURCE_GUIDE)),
        order=_order(row.get(col.RESOURCE_ORDER)),
        status=resolve_resource_status(row.get(col.RESOURCE_STATUS)),
    )


def transform_exercise(row: dict[str, str], chunk_id: str) -> ExerciseIn:
    return ExerciseIn(
        chunk_id=chunk_id,
        title=clean_text(row.get(col.EXERCISE_TITLE)) or "Untitled Exercise",
        content=clean_text(row.get(col.EXERCISE_TEXT)) or "",
        type=clean_text(row.get(col.EXERCISE_TYPE)) or DEFAULT_EXERCISE_TYPE,
        time_minutes=parse_integer(row.get(col.EXERCISE_TIME)),
        order=_order(row.get(col.EXERCISE_ORDER)),
    )
