from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

CourseStatus = Literal["Active"]
ResourceType = Literal["Article", "Blog", "Paper", "Website"]
ResourceStatus = Literal["Core", "Maybe", "Supplementary", "Optional"]


class CourseIn(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None
    status: CourseStatus = "Active"


class UnitIn(BaseModel):
    course_id: str
    title: str
    order: int = 1
    duration: Optional[int] = None


class ChunkIn(BaseModel):
    unit_id: str
    title: str
    content: Optional[str] = None
    order: int = 1
    time_minutes: Optional[int] = None


class ResourceIn(BaseModel):
    chunk_id: str
    title: str
    url: str = ""
    author: Optional[str] = None
    year: Optional[int] = None
    type: ResourceType = "Article"
    time_minutes: Optional[int] = None
    description: Optional[str] = None
    order: int = 1
    status: ResourceStatus = "Core"


class ExerciseIn(BaseModel):
    chunk_id: str
    title: str
    content: str = ""
    type: str = "Free text"
    time_minutes: Optional[int] = None
    order: int = 1
