"""Summaries printed by the exercise runner."""
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from sqlalchemy import inspect


class RecordSummary(BaseModel):
    object: str
    id: Optional[UUID] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record) -> "RecordSummary":
        """Summarize only the columns already loaded on the record."""
        loaded = record.__dict__
        fields = {
            column.key: loaded[column.key]
            for column in inspect(type(record)).columns
            if column.key in loaded and column.key not in ("id", "created_at")
        }
        return cls(object=type(record).__name__, id=loaded.get("id"), fields=fields)


class ExerciseResult(BaseModel):
    exercise: str
    record_id: Optional[UUID] = None  # returned by the single-insert exercises
    records: List[RecordSummary] = Field(default_factory=list)
    message: Optional[str] = None
