from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.inspection import inspect
from sqlalchemy.orm import Session

from coursebase.config import get_settings
from coursebase.database import create_schema, get_db
from coursebase.models import Chunk, Course, Exercise, Resource, Unit
from coursebase.seed import columns as col
from coursebase.seed.csv_reader import parse_rows
from coursebase.seed.errors import ParseError
from coursebase.seed.gateway import SeedGateway
from coursebase.seed.normalizers import clean_text
from coursebase.seed.transformers import (
    transform_chunk,
    transform_course,
    transform_exercise,
    transform_resource,
    transform_unit,
)

logger = logging.getLogger(__name__)

app = FastAPI(title=get_settings().app_name)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

# entity -> (transformer, parent name column, parent id field)
VALIDATION_MAP = {
    "courses": (transform_course, None, None),
    "units": (transform_unit, col.UNIT_COURSE, "course_id"),
    "chunks": (transform_chunk, col.CHUNK_UNIT, "unit_id"),
    "resources": (transform_resource, col.RESOURCE_CHUNK, "chunk_id"),
    "exercises": (transform_exercise, col.EXERCISE_CHUNK, "chunk_id"),
}


def serialize(instance):
    return {c.key: getattr(instance, c.key) for c in inspect(instance).mapper.column_attrs}


def _get_or_404(db: Session, model, entity_id: str, label: str):
    obj = db.get(model, entity_id)
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return obj


@app.on_event("startup")
def startup():
    create_schema()


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}


@app.get("/health/database")
def health_database(db: Session = Depends(get_db)):
    try:
        counts = SeedGateway(db).count_all()
    except SQLAlchemyError as exc:
        logger.error("database health check failed: %s", exc)
        return {"status": "error", "message": "Failed to check database tables", "error": str(exc)}
    return {"status": "ok", "tables": counts, "timestamp": datetime.utcnow().isoformat()}


@app.get("/courses")
def list_courses(status: Optional[str] = None, q: Optional[str] = None, db: Session = Depends(get_db)):
    stmt = select(Course)
    if status:
        stmt = stmt.where(Course.status == status)
    if q:
        stmt = stmt.where(Course.name.contains(q))
    return [serialize(c) for c in db.scalars(stmt.order_by(Course.name)).all()]


@app.get("/courses/by-slug/{slug}")
def get_course_by_slug(slug: str, db: Session = Depends(get_db)):
    course = db.scalar(select(Course).where(Course.slug == slug))
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return serialize(course)


@app.get("/courses/{course_id}")
def get_course(course_id: str, db: Session = Depends(get_db)):
    return serialize(_get_or_404(db, Course, course_id, "Course"))


@app.get("/courses/{course_id}/units")
def list_course_units(course_id: str, db: Session = Depends(get_db)):
    _get_or_404(db, Course, course_id, "Course")
    return [serialize(u) for u in db.scalars(select(Unit).where(Unit.course_id == course_id).order_by(Unit.order)).all()]


@app.get("/courses/{course_id}/outline")
def course_outline(course_id: str, db: Session = Depends(get_db)):
    course = _get_or_404(db, Course, course_id, "Course")
    units = []
    for unit in sorted(course.units, key=lambda u: u.order):
        chunks = []
        for chunk in sorted(unit.chunks, key=lambda c: c.order):
            chunks.append(
                {
                    **serialize(chunk),
                    "resources": [serialize(r) for r in sorted(chunk.resources, key=lambda r: r.order)],
                    "exercises": [serialize(e) for e in sorted(chunk.exercises, key=lambda e: e.order)],
                }
            )
        units.append({**serialize(unit), "chunks": chunks})
    return {**serialize(course), "units": units}


@app.delete("/courses/{course_id}")
def delete_course(course_id: str, db: Session = Depends(get_db)):
    course = _get_or_404(db, Course, course_id, "Course")
    db.delete(course)
    db.commit()
    return {"status": "deleted"}


@app.get("/units")
def list_units(db: Session = Depends(get_db)):
    return [serialize(u) for u in db.scalars(select(Unit).order_by(Unit.order)).all()]


@app.get("/units/{unit_id}")
def get_unit(unit_id: str, db: Session = Depends(get_db)):
    return serialize(_get_or_404(db, Unit, unit_id, "Unit"))


@app.get("/units/{unit_id}/chunks")
def list_unit_chunks(unit_id: str, db: Session = Depends(get_db)):
    _get_or_404(db, Unit, unit_id, "Unit")
    return [serialize(c) for c in db.scalars(select(Chunk).where(Chunk.unit_id == unit_id).order_by(Chunk.order)).all()]


@app.get("/chunks")
def list_chunks(db: Session = Depends(get_db)):
    return [serialize(c) for c in db.scalars(select(Chunk).order_by(Chunk.order)).all()]


@app.get("/chunks/{chunk_id}")
def get_chunk(chunk_id: str, db: Session = Depends(get_db)):
    return serialize(_get_or_404(db, Chunk, chunk_id, "Chunk"))


@app.get("/chunks/{chunk_id}/resources")
def list_chunk_resources(chunk_id: str, db: Session = Depends(get_db)):
    _get_or_404(db, Chunk, chunk_id, "Chunk")
    stmt = select(Resource).where(Resource.chunk_id == chunk_id).order_by(Resource.order)
    return [serialize(r) for r in db.scalars(stmt).all()]


@app.get("/chunks/{chunk_id}/exercises")
def list_chunk_exercises(chunk_id: str, db: Session = Depends(get_db)):
    _get_or_404(db, Chunk, chunk_id, "Chunk")
    stmt = select(Exercise).where(Exercise.chunk_id == chunk_id).order_by(Exercise.order)
    return [serialize(e) for e in db.scalars(stmt).all()]


@app.get("/resources/{resource_id}")
def get_resource(resource_id: str, db: Session = Depends(get_db)):
    return serialize(_get_or_404(db, Resource, resource_id, "Resource"))


@app.get("/exercises/{exercise_id}")
def get_exercise(exercise_id: str, db: Session = Depends(get_db)):
    return serialize(_get_or_404(db, Exercise, exercise_id, "Exercise"))


@app.get("/preview/{chunk_id}")
def preview_chunk(chunk_id: str, db: Session = Depends(get_db)):
    chunk = _get_or_404(db, Chunk, chunk_id, "Chunk")
    resources = sorted(chunk.resources, key=lambda r: r.order)
    exercises = sorted(chunk.exercises, key=lambda e: e.order)
    return {
        "chunk": serialize(chunk),
        "unit": serialize(chunk.unit),
        "resources": [serialize(r) for r in resources],
        "exercises": [serialize(e) for e in exercises],
        "resource_time_minutes": sum(r.time_minutes or 0 for r in resources),
    }


@app.post("/import/csv/{entity_name}/validate")
def validate_csv_entity(entity_name: str, file: UploadFile = File(...)):
    if entity_name not in VALIDATION_MAP:
        raise HTTPException(status_code=400, detail=f"Unsupported entity '{entity_name}'")
    transform, parent_column, parent_field = VALIDATION_MAP[entity_name]
    try:
        data = file.file.read().decode("utf-8-sig")
        rows = parse_rows(data, source=file.filename or entity_name)
    except (ParseError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    missing_parent = []
    sample_rows = []
    for i, row in enumerate(rows, start=2):
        if parent_column is None:
            record = transform(row).model_dump()
        else:
            parent_name = clean_text(row.get(parent_column))
            if parent_name is None:
                missing_parent.append(i)
            record = transform(row, "").model_dump()
            record.pop(parent_field)
            record["parent_name"] = parent_name
        if len(sample_rows) < 10:
            sample_rows.append(record)

    return {
        "entity": entity_name,
        "rows": len(rows),
        "missing_parent_lines": missing_parent,
        "sample_rows": sample_rows,
    }
