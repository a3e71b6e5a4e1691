from __future__ import annotations

import logging

from pydantic import BaseModel
from sqlalchemy import delete, func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursebase.models import SEED_MODELS, Chunk, Course, Exercise, Resource, Unit
from coursebase.schemas import ChunkIn, CourseIn, ExerciseIn, ResourceIn, UnitIn
from coursebase.seed.errors import StorageError

logger = logging.getLogger(__name__)


def _db_detail(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


class SeedGateway:
    """Row-at-a-time writes for the seeder. Each insert commits on its own."""

    def __init__(self, db: Session):
        self.db = db

    def tables_exist(self) -> bool:
        return inspect(self.db.get_bind()).has_table(Course.__tablename__)

    def clear_all(self) -> None:
        if not self.tables_exist():
            logger.info("tables do not exist yet, skipping clear")
            return
        logger.info("clearing seeded tables")
        try:
            for model in reversed(SEED_MODELS):
                self.db.execute(delete(model))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"clearing tables failed: {_db_detail(exc)}") from exc
        logger.info("database cleared")

    def _insert(self, model, record: BaseModel, label: str) -> str:
        obj = model(**record.model_dump())
        try:
            self.db.add(obj)
            self.db.flush()
            entity_id = obj.id
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"{model.__tablename__} insert failed: {_db_detail(exc)}") from exc
        logger.debug("inserted %s: %s (%s)", model.__tablename__, label, entity_id)
        return entity_id

    def insert_course(self, record: CourseIn) -> str:
        return self._insert(Course, record, record.name)

    def insert_unit(self, record: UnitIn) -> str:
        return self._insert(Unit, record, record.title)

    def insert_chunk(self, record: ChunkIn) -> str:
        return self._insert(Chunk, record, record.title)

    def insert_resource(self, record: ResourceIn) -> str:
        return self._insert(Resource, record, record.title)

    def insert_exercise(self, record: ExerciseIn) -> str:
        return self._insert(Exercise, record, record.title)

    def count_all(self) -> dict[str, int]:
        return {
            model.__tablename__: int(self.db.scalar(select(func.count()).select_from(model)) or 0)
            for model in SEED_MODELS
        }
