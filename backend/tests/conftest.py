"""
Shared fixtures: an in-memory SQLite database with foreign keys enforced,
and a directory of CSV exports shaped like the real spreadsheet exports.
"""
import csv
import os

# Keep the module-level engine away from any on-disk database.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coursebase.database import make_engine
from coursebase.models import Base
from sample_exports import (
    CHUNK_HEADER,
    CHUNK_ROWS,
    COURSE_HEADER,
    COURSE_ROWS,
    EXERCISE_HEADER,
    EXERCISE_ROWS,
    RESOURCE_HEADER,
    RESOURCE_ROWS,
    UNIT_HEADER,
    UNIT_ROWS,
)


def _write_csv(path, header, rows, encoding="utf-8"):
    with open(path, "w", encoding=encoding, newline="") as f:
        w = csv.writer(f)
        w.writerow(header)
        w.writerows(rows)
    return path


@pytest.fixture
def write_csv():
    return _write_csv


@pytest.fixture
def csv_dir(tmp_path):
    d = tmp_path / "future-tables"
    d.mkdir()
    # Course.csv carries a byte-order mark, as spreadsheet exports often do.
    _write_csv(d / "Course.csv", COURSE_HEADER, COURSE_ROWS, encoding="utf-8-sig")
    _write_csv(d / "Unit.csv", UNIT_HEADER, UNIT_ROWS)
    _write_csv(d / "Chunk.csv", CHUNK_HEADER, CHUNK_ROWS)
    _write_csv(d / "Chunk-Resource.csv", RESOURCE_HEADER, RESOURCE_ROWS)
    _write_csv(d / "Exercise.csv", EXERCISE_HEADER, EXERCISE_ROWS)
    return d


@pytest.fixture
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
