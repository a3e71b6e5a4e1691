"""
Seeding orchestrator: loads the five exports, optionally clears existing
content, and inserts rows parent-first (courses, units, chunks, then
resources and exercises), resolving each row's parent by name.

A bad row never stops the run. Its error is recorded in the report and the
stage moves on. Only a load failure (missing or unparsable file) or a
failed clear aborts the run, by propagating the exception to the caller.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from coursebase.seed import columns as col
from coursebase.seed.csv_reader import read_rows
from coursebase.seed.errors import ResolutionError
from coursebase.seed.gateway import SeedGateway
from coursebase.seed.normalizers import split_and_clean
from coursebase.seed.resolution import NameIndex, SeedIndexes
from coursebase.seed.transformers import (
    transform_chunk,
    transform_course,
    transform_exercise,
    transform_resource,
    transform_unit,
)

logger = logging.getLogger(__name__)

ENTITY_KINDS = ("courses", "units", "chunks", "resources", "exercises")
STAGES = (
    "idle",
    "loading",
    "clearing",
    "seeding_courses",
    "seeding_units",
    "seeding_chunks",
    "seeding_resources",
    "seeding_exercises",
    "reporting",
    "done",
)

Row = dict[str, str]


class SeedReport(BaseModel):
    processed: dict[str, int] = Field(default_factory=lambda: dict.fromkeys(ENTITY_KINDS, 0))
    errors: dict[str, list[str]] = Field(default_factory=lambda: {kind: [] for kind in ENTITY_KINDS})
    skipped_exercises: int = 0
    loaded: dict[str, int] = Field(default_factory=dict)
    final_counts: dict[str, int] = Field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(len(v) for v in self.errors.values())

    def all_errors(self) -> list[str]:
        return [msg for kind in ENTITY_KINDS for msg in self.errors[kind]]

    def summary(self) -> dict[str, Any]:
        return {
            "processed": dict(self.processed),
            "error_count": self.error_count,
            "skipped_exercises": self.skipped_exercises,
            "final_counts": dict(self.final_counts),
        }


class Seeder:
    def __init__(
        self,
        db: Session,
        csv_dir: str | Path,
        clear_existing: bool = True,
        strict_exercise_parents: bool = False,
    ):
        self.gateway = SeedGateway(db)
        self.csv_dir = Path(csv_dir)
        self.clear_existing = clear_existing
        self.strict_exercise_parents = strict_exercise_parents
        self.stage = "idle"
        self.stage_history: list[str] = []
        self.indexes = SeedIndexes()
        self.report = SeedReport()

    def _enter(self, stage: str) -> None:
        if stage not in STAGES:
            raise ValueError(f"unknown stage {stage!r}")
        self.stage = stage
        self.stage_history.append(stage)
        logger.info("stage: %s", stage, extra={"stage": stage})

    def run(self) -> SeedReport:
        self.indexes = SeedIndexes()
        self.report = SeedReport()
        self.stage_history = []
        logger.info("starting seed from %s", self.csv_dir, extra={"path": str(self.csv_dir)})

        self._enter("loading")
        data = self.load_sources()

        if self.clear_existing:
            self._enter("clearing")
            self.gateway.clear_all()

        self._enter("seeding_courses")
        self.seed_courses(data["courses"])
        self._enter("seeding_units")
        self.seed_units(data["units"])
        self._warn_undeclared(data["courses"], col.COURSE_UNITS, self.indexes.units, "units")
        self._enter("seeding_chunks")
        self.seed_chunks(data["chunks"])
        self._warn_undeclared(data["units"], col.UNIT_CHUNKS, self.indexes.chunks, "chunks")
        self._enter("seeding_resources")
        self.seed_resources(data["resources"])
        self._enter("seeding_exercises")
        self.seed_exercises(data["exercises"])

        self._enter("reporting")
        self.report.final_counts = self.gateway.count_all()
        self._log_report()
        self._enter("done")
        return self.report

    def load_sources(self) -> dict[str, list[Row]]:
        # The five exports are independent; read them in parallel and join here.
        with ThreadPoolExecutor(max_workers=len(col.SOURCE_FILES)) as pool:
            futures = {kind: pool.submit(read_rows, self.csv_dir / name) for kind, name in col.SOURCE_FILES.items()}
            data = {kind: futures[kind].result() for kind in col.SOURCE_FILES}
        self.report.loaded = {kind: len(rows) for kind, rows in data.items()}
        logger.info(
            "loaded %s",
            ", ".join(f"{n} {kind}" for kind, n in self.report.loaded.items()),
            extra={"counts": self.report.loaded},
        )
        return data

    def _record_error(self, kind: str, singular: str, name: str, exc: Exception) -> None:
        msg = f"Failed to insert {singular}: {name} - {exc}"
        logger.error(msg, extra={"entity": kind, "row_name": name, "error": str(exc)})
        self.report.errors[kind].append(msg)

    def _seed_rows(
        self,
        kind: str,
        singular: str,
        rows: list[Row],
        name_field: str,
        parent_of: Optional[Callable[[Row], str]],
        transform: Callable[..., BaseModel],
        insert: Callable[[Any], str],
        register: Optional[Callable[[Row, str], None]] = None,
        skip_unresolved: bool = False,
    ) -> None:
        for row in rows:
            name = row.get(name_field, "")
            args: list[Any] = [row]
            if parent_of is not None:
                try:
                    args.append(parent_of(row))
                except ResolutionError as exc:
                    if skip_unresolved:
                        self.report.skipped_exercises += 1
                        logger.info("skipping %s %r: %s", singular, name, exc, extra={"entity": kind, "row_name": name})
                        continue
                    self._record_error(kind, singular, name, exc)
                    continue
            try:
                new_id = insert(transform(*args))
            except Exception as exc:
                self._record_error(kind, singular, name, exc)
                continue
            if register is not None:
                register(row, new_id)
            self.report.processed[kind] += 1

    def seed_courses(self, rows: list[Row]) -> None:
        def register(row: Row, course_id: str) -> None:
            self.indexes.courses.register(row.get(col.COURSE_NAME), course_id)

        self._seed_rows(
            "courses", "course", rows, col.COURSE_NAME, None, transform_course, self.gateway.insert_course, register
        )

    def seed_units(self, rows: list[Row]) -> None:
        def register(row: Row, unit_id: str) -> None:
            # Other exports refer to a unit either by topic or by its "Course - Unit" label.
            self.indexes.units.register(row.get(col.UNIT_TOPIC), unit_id)
            self.indexes.units.register(row.get(col.UNIT_COURSE_UNIT), unit_id)

        self._seed_rows(
            "units",
            "unit",
            rows,
            col.UNIT_TOPIC,
            lambda row: self.indexes.courses.resolve(row.get(col.UNIT_COURSE)),
            transform_unit,
            self.gateway.insert_unit,
            register,
        )

    def seed_chunks(self, rows: list[Row]) -> None:
        def register(row: Row, chunk_id: str) -> None:
            self.indexes.chunks.register(row.get(col.CHUNK_TITLE), chunk_id)

        self._seed_rows(
            "chunks",
            "chunk",
            rows,
            col.CHUNK_TITLE,
            lambda row: self.indexes.units.resolve(row.get(col.CHUNK_UNIT)),
            transform_chunk,
            self.gateway.insert_chunk,
            register,
        )

    def seed_resources(self, rows: list[Row]) -> None:
        self._seed_rows(
            "resources",
            "resource",
            rows,
            col.RESOURCE_NAME,
            lambda row: self.indexes.chunks.resolve(row.get(col.RESOURCE_CHUNK)),
            transform_resource,
            self.gateway.insert_resource,
        )

    def seed_exercises(self, rows: list[Row]) -> None:
        self._seed_rows(
            "exercises",
            "exercise",
            rows,
            col.EXERCISE_TITLE,
            lambda row: self.indexes.chunks.resolve(row.get(col.EXERCISE_CHUNK)),
            transform_exercise,
            self.gateway.insert_exercise,
            skip_unresolved=not self.strict_exercise_parents,
        )

    def _warn_undeclared(self, parent_rows: list[Row], field: str, index: NameIndex, kind: str) -> None:
        missing = sorted({name for row in parent_rows for name in split_and_clean(row.get(field)) if name not in index})
        if missing:
            logger.warning(
                "%d %s listed by their parent rows were not seeded: %s",
                len(missing),
                kind,
                missing[:20],
                extra={"entity": kind, "count": len(missing)},
            )

    def _log_report(self) -> None:
        for kind in ENTITY_KINDS:
            logger.info("%s processed: %d", kind, self.report.processed[kind], extra={"entity": kind, "count": self.report.processed[kind]})
        if self.report.skipped_exercises:
            logger.info("exercises skipped (no chunk): %d", self.report.skipped_exercises)
        if self.report.error_count:
            logger.warning("errors encountered: %d", self.report.error_count, extra={"count": self.report.error_count})
        logger.info("final database state: %s", self.report.final_counts, extra={"counts": self.report.final_counts})
