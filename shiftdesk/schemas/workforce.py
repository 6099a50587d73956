from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    body: str | None
    is_public: bool
    created_at: datetime


class PostIn(BaseModel):
    title: str
    body: str | None = None
    is_public: bool = True


class PostUpdate(BaseModel):
    title: str | None = None
    body: str | None = None
    is_public: bool | None = None


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    title: str
    is_public: bool
    assignee_ids: list[int]
    due_date: date | None


class TaskUpdate(BaseModel):
    title: str | None = None
    due_date: date | None = None


class ShiftDetailOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    work_date: date
    type: str
    start_time: datetime | None
    end_time: datetime | None


class ShiftDetailUpdate(BaseModel):
    type: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None


class DailyNoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    note_date: date
    body: str


class DailyNoteIn(BaseModel):
    note_date: date
    body: str


class DailyNoteUpdate(BaseModel):
    body: str
