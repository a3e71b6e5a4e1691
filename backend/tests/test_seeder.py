"""
End-to-end seeding tests: CSV directory in, populated database out.
"""
import pytest
from sqlalchemy import select

from coursebase.models import Chunk, Course, Exercise, Resource, Unit
from coursebase.seed import columns as col
from coursebase.seed.csv_reader import read_rows
from coursebase.seed.errors import NotFoundError, ParseError
from coursebase.seed.gateway import SeedGateway
from coursebase.seed.seeder import STAGES, Seeder
from coursebase.seed.transformers import transform_resource
from coursebase.seed.verify import verify_database

from sample_exports import (
    CHUNK_HEADER,
    CHUNK_ROWS,
    COURSE_HEADER,
    EXERCISE_HEADER,
    EXERCISE_ROWS,
    EXPECTED_COUNTS,
    RESOURCE_HEADER,
    RESOURCE_ROWS,
    UNIT_HEADER,
)


class TestFullRun:
    def test_seeds_every_table(self, db, csv_dir):
        report = Seeder(db, csv_dir).run()
        assert report.error_count == 0
        assert report.skipped_exercises == 0
        assert report.loaded == EXPECTED_COUNTS
        assert report.processed == EXPECTED_COUNTS
        assert report.final_counts == EXPECTED_COUNTS

    def test_no_orphans_after_seed(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        verification = verify_database(db)
        assert verification.total_orphans == 0
        assert verification.empty_tables == []

    def test_parents_resolved_by_name(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        course = db.scalar(select(Course).where(Course.slug == "agi-strategy"))
        assert sorted(u.title for u in course.units) == ["Drivers of AI progress", "Racing to a Better Future"]

        racing = db.scalar(select(Unit).where(Unit.title == "Racing to a Better Future"))
        # One chunk names the unit by topic, the other by its "Course - Unit" label.
        assert sorted(c.title for c in racing.chunks) == ["Imagining a better future", "Intelligence explosion"]

    def test_generated_slug_and_forced_status(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        alignment = db.scalar(select(Course).where(Course.name == "AI Alignment"))
        assert alignment.slug == "ai-alignment"
        assert alignment.status == "Active"

    def test_multiline_content_survives(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        chunk = db.scalar(select(Chunk).where(Chunk.title == "Imagining a better future"))
        assert chunk.content.startswith("You're the product of 8,000 generations")
        assert "\n" in chunk.content

    def test_very_long_content_is_seeded(self, db, csv_dir, write_csv):
        rows = [list(r) for r in CHUNK_ROWS]
        rows[0][CHUNK_HEADER.index(col.CHUNK_CONTENT)] = "x" * 200_000
        write_csv(csv_dir / col.CHUNK_FILE, CHUNK_HEADER, rows)

        report = Seeder(db, csv_dir).run()
        assert report.error_count == 0
        assert report.final_counts == EXPECTED_COUNTS
        chunk = db.scalar(select(Chunk).where(Chunk.title == "Imagining a better future"))
        assert len(chunk.content) == 200_000

    def test_resource_fields_stored_as_transformed(self, db, csv_dir):
        seeder = Seeder(db, csv_dir)
        seeder.run()
        for row in read_rows(csv_dir / col.RESOURCE_FILE):
            expected = transform_resource(row, seeder.indexes.chunks.resolve(row[col.RESOURCE_CHUNK]))
            stored = db.scalar(select(Resource).where(Resource.title == expected.title))
            for field, value in expected.model_dump().items():
                assert getattr(stored, field) == value, field

    def test_resource_type_and_status_defaults(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        by_title = {r.title: r for r in db.scalars(select(Resource)).all()}
        assert by_title["Situational Awareness"].type == "Paper"
        assert by_title["Situational Awareness"].year == 2023
        assert by_title["Situational Awareness"].status == "Maybe"
        assert by_title["Compute essay"].type == "Blog"
        assert by_title["Compute essay"].status == "Core"
        assert by_title["Alignment talk"].type == "Website"

    def test_exercise_defaults(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        forecast = db.scalar(select(Exercise).where(Exercise.title == "Compute forecast"))
        assert forecast.type == "Free text"
        assert forecast.content == ""
        assert forecast.order == 1
        assert forecast.time_minutes is None

    def test_stage_history(self, db, csv_dir):
        seeder = Seeder(db, csv_dir)
        seeder.run()
        assert tuple(seeder.stage_history) == STAGES[1:]
        assert seeder.stage == "done"

    def test_stage_history_without_clear(self, db, csv_dir):
        seeder = Seeder(db, csv_dir, clear_existing=False)
        seeder.run()
        assert "clearing" not in seeder.stage_history


class TestIdempotence:
    def test_reseed_gives_same_counts(self, db, csv_dir):
        first = Seeder(db, csv_dir).run()
        second = Seeder(db, csv_dir).run()
        assert first.final_counts == second.final_counts == EXPECTED_COUNTS

    def test_append_mode_fails_on_duplicate_slugs(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        report = Seeder(db, csv_dir, clear_existing=False).run()
        assert report.processed["courses"] == 0
        assert len(report.errors["courses"]) == 2
        assert report.final_counts["courses"] == 2


class TestPartialFailure:
    def test_duplicate_slug_fails_one_course_and_its_units(self, db, csv_dir, write_csv):
        write_csv(
            csv_dir / col.COURSE_FILE,
            COURSE_HEADER,
            [
                ["Course A", "Active", "", "a", "", "", "", ""],
                ["Course B", "Active", "", "b", "", "", "", ""],
                ["Course C", "Active", "", "a", "", "", "", ""],
            ],
        )
        write_csv(
            csv_dir / col.UNIT_FILE,
            UNIT_HEADER,
            [
                ["A - One", "One", "", "1", "Course A", "", ""],
                ["B - Two", "Two", "", "1", "Course B", "", ""],
                ["C - Three", "Three", "", "1", "Course C", "", ""],
            ],
        )
        report = Seeder(db, csv_dir).run()

        assert report.processed["courses"] == 2
        assert len(report.errors["courses"]) == 1
        assert report.errors["courses"][0].startswith("Failed to insert course: Course C - ")
        assert report.final_counts["courses"] == 2

        assert report.processed["units"] == 2
        assert len(report.errors["units"]) == 1
        assert "Course not found" in report.errors["units"][0]

    def test_unresolved_chunk_unit_is_an_error(self, db, csv_dir, write_csv):
        write_csv(csv_dir / col.CHUNK_FILE, CHUNK_HEADER, CHUNK_ROWS + [
            ["Lost chunk", "No such unit", "", "1", "", "", ""],
        ])
        report = Seeder(db, csv_dir).run()
        assert report.processed["chunks"] == 4
        assert report.errors["chunks"] == [
            "Failed to insert chunk: Lost chunk - Unit not found: 'No such unit'"
        ]
        assert report.final_counts["chunks"] == 4
        assert db.scalar(select(Chunk).where(Chunk.title == "Lost chunk")) is None

    def test_unresolved_resource_chunk_is_an_error(self, db, csv_dir, write_csv):
        write_csv(csv_dir / col.RESOURCE_FILE, RESOURCE_HEADER, RESOURCE_ROWS + [
            ["x", "https://example.org", "", "", "", "", "", "", "Lost resource", "1", "", "No such chunk", "", ""],
        ])
        report = Seeder(db, csv_dir).run()
        assert report.processed["resources"] == 4
        assert report.errors["resources"] == [
            "Failed to insert resource: Lost resource - Chunk not found: 'No such chunk'"
        ]


class TestExerciseParents:
    @pytest.fixture
    def orphan_exercise_dir(self, csv_dir, write_csv):
        write_csv(csv_dir / col.EXERCISE_FILE, EXERCISE_HEADER, EXERCISE_ROWS + [
            ["p", "Lost exercise", "", "1", "", "Free text", "No such chunk", ""],
        ])
        return csv_dir

    def test_unresolved_exercise_is_skipped_silently(self, db, orphan_exercise_dir):
        report = Seeder(db, orphan_exercise_dir).run()
        assert report.skipped_exercises == 1
        assert report.errors["exercises"] == []
        assert report.processed["exercises"] == 3

    def test_strict_mode_records_error(self, db, orphan_exercise_dir):
        report = Seeder(db, orphan_exercise_dir, strict_exercise_parents=True).run()
        assert report.skipped_exercises == 0
        assert len(report.errors["exercises"]) == 1
        assert "Chunk not found" in report.errors["exercises"][0]


class TestLoadFailures:
    def test_missing_file_aborts_before_clearing(self, db, csv_dir):
        Seeder(db, csv_dir).run()
        (csv_dir / col.EXERCISE_FILE).unlink()

        seeder = Seeder(db, csv_dir)
        with pytest.raises(NotFoundError):
            seeder.run()
        assert seeder.stage == "loading"
        assert SeedGateway(db).count_all() == EXPECTED_COUNTS

    def test_unparsable_file_aborts(self, db, csv_dir):
        (csv_dir / col.CHUNK_FILE).write_text('Title,Order\n"Intro"x,1\n', encoding="utf-8")
        with pytest.raises(ParseError):
            Seeder(db, csv_dir).run()

    def test_header_only_files_seed_nothing(self, db, tmp_path, write_csv):
        for name in col.SOURCE_FILES.values():
            write_csv(tmp_path / name, ["Title"], [])
        report = Seeder(db, tmp_path).run()
        assert report.final_counts == dict.fromkeys(EXPECTED_COUNTS, 0)
        assert report.error_count == 0
