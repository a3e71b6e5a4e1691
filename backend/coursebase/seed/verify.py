"""
Post-seed integrity check.

Loads every seeded table, flags empty tables (fatal for the seed command)
and counts child rows whose parent id does not resolve (reported only).
An empty table stops the check before the orphan pass and the sample.
"""
from __future__ import annotations

import logging

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from coursebase.models import Chunk, Course, Exercise, Resource, Unit
from coursebase.seed.errors import IntegrityWarning

logger = logging.getLogger(__name__)


class VerificationReport(BaseModel):
    counts: dict[str, int] = Field(default_factory=dict)
    empty_tables: list[str] = Field(default_factory=list)
    orphans: dict[str, int] = Field(default_factory=dict)
    orphan_details: list[str] = Field(default_factory=list)
    sample: list[str] = Field(default_factory=list)

    @property
    def total_orphans(self) -> int:
        return sum(self.orphans.values())

    def raise_for_empty(self) -> None:
        if self.empty_tables:
            raise IntegrityWarning(self.empty_tables)


def _find_orphans(children, parent_ids: set[str], fk: str, kind: str, report: VerificationReport) -> None:
    count = 0
    for child in children:
        parent_id = getattr(child, fk)
        if parent_id not in parent_ids:
            count += 1
            report.orphan_details.append(f"Orphaned {kind}: {child.title} ({fk}: {parent_id})")
    report.orphans[kind] = count


def _sample(courses, units, chunks, resources, exercises) -> list[str]:
    lines: list[str] = []
    if not courses:
        return lines
    course = courses[0]
    lines.append(f"Course: {course.name} ({course.slug})")
    lines.append(f"Description: {course.description or 'No description'}")
    course_units = [u for u in units if u.course_id == course.id]
    lines.append(f"Units in this course: {len(course_units)}")
    if not course_units:
        return lines
    unit = course_units[0]
    lines.append(f"  Unit: {unit.title} (order: {unit.order}, duration: {unit.duration}min)")
    unit_chunks = [c for c in chunks if c.unit_id == unit.id]
    lines.append(f"  Chunks in this unit: {len(unit_chunks)}")
    if not unit_chunks:
        return lines
    chunk = unit_chunks[0]
    lines.append(f"    Chunk: {chunk.title} (order: {chunk.order}, time: {chunk.time_minutes}min)")
    chunk_resources = [r for r in resources if r.chunk_id == chunk.id]
    chunk_exercises = [e for e in exercises if e.chunk_id == chunk.id]
    lines.append(f"    Resources: {len(chunk_resources)}, Exercises: {len(chunk_exercises)}")
    if chunk_resources:
        r = chunk_resources[0]
        lines.append(f"      Resource: {r.title} ({r.type}, {r.status})")
    if chunk_exercises:
        e = chunk_exercises[0]
        lines.append(f"      Exercise: {e.title} ({e.type})")
    return lines


def verify_database(db: Session) -> VerificationReport:
    courses = db.scalars(select(Course).order_by(Course.created_at, Course.name)).all()
    units = db.scalars(select(Unit).order_by(Unit.order)).all()
    chunks = db.scalars(select(Chunk).order_by(Chunk.order)).all()
    resources = db.scalars(select(Resource).order_by(Resource.order)).all()
    exercises = db.scalars(select(Exercise).order_by(Exercise.order)).all()

    report = VerificationReport(
        counts={
            "courses": len(courses),
            "units": len(units),
            "chunks": len(chunks),
            "resources": len(resources),
            "exercises": len(exercises),
        }
    )
    report.empty_tables = [name for name, n in report.counts.items() if n == 0]
    if report.empty_tables:
        for name in report.empty_tables:
            logger.error("table %s has zero rows", name, extra={"entity": name})
        return report

    course_ids = {c.id for c in courses}
    unit_ids = {u.id for u in units}
    chunk_ids = {c.id for c in chunks}
    _find_orphans(units, course_ids, "course_id", "units", report)
    _find_orphans(chunks, unit_ids, "unit_id", "chunks", report)
    _find_orphans(resources, chunk_ids, "chunk_id", "resources", report)
    _find_orphans(exercises, chunk_ids, "chunk_id", "exercises", report)
    for line in report.orphan_details:
        logger.error(line)
    if report.total_orphans:
        logger.warning("orphaned records found: %s", report.orphans, extra={"counts": report.orphans})
    else:
        logger.info("all relationships are intact, no orphaned records found")

    report.sample = _sample(courses, units, chunks, resources, exercises)
    return report
