from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

COURSE_STATUSES = ("Active",)
RESOURCE_TYPES = ("Article", "Blog", "Paper", "Website")
RESOURCE_STATUSES = ("Core", "Maybe", "Supplementary", "Optional")


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class Course(Base):
    __tablename__ = "courses"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String)
    slug: Mapped[str] = mapped_column(String, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Enum(*COURSE_STATUSES, name="course_status"), default="Active")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    units: Mapped[list["Unit"]] = relationship(back_populates="course", cascade="all, delete-orphan", passive_deletes=True)


class Unit(Base):
    __tablename__ = "units"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    course_id: Mapped[str] = mapped_column(String, ForeignKey("courses.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String)
    order: Mapped[int] = mapped_column(Integer)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    course: Mapped[Course] = relationship(back_populates="units")
    chunks: Mapped[list["Chunk"]] = relationship(back_populates="unit", cascade="all, delete-orphan", passive_deletes=True)


class Chunk(Base):
    __tablename__ = "chunks"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    unit_id: Mapped[str] = mapped_column(String, ForeignKey("units.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer)
    time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    unit: Mapped[Unit] = relationship(back_populates="chunks")
    resources: Mapped[list["Resource"]] = relationship(back_populates="chunk", cascade="all, delete-orphan", passive_deletes=True)
    exercises: Mapped[list["Exercise"]] = relationship(back_populates="chunk", cascade="all, delete-orphan", passive_deletes=True)


class Resource(Base):
    __tablename__ = "resources"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    chunk_id: Mapped[str] = mapped_column(String, ForeignKey("chunks.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String)
    url: Mapped[str] = mapped_column(Text)
    author: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    type: Mapped[str] = mapped_column(Enum(*RESOURCE_TYPES, name="resource_type"))
    time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(Enum(*RESOURCE_STATUSES, name="resource_status"), default="Core")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    chunk: Mapped[Chunk] = relationship(back_populates="resources")


class Exercise(Base):
    __tablename__ = "exercises"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    chunk_id: Mapped[str] = mapped_column(String, ForeignKey("chunks.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String)
    content: Mapped[str] = mapped_column(Text, default="")
    # Free text in the exports ("Free text", "Multiple choice", ...), not an enum.
    type: Mapped[str] = mapped_column(String)
    time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    order: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    chunk: Mapped[Chunk] = relationship(back_populates="exercises")


# Parent-first; deletes run in reverse.
SEED_MODELS = (Course, Unit, Chunk, Resource, Exercise)
