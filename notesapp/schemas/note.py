"""
Notes Backend - Note Request/Response Schemas
==============================================

What:  Pydantic models defining the /api/notes contract.
Why:   Strict input validation, automatic serialization, and OpenAPI doc generation.
How:   FastAPI validates request bodies against these models and serializes
       ORM rows through the response models (from_attributes).

Design Decision:
    Schemas are separate from SQLAlchemy models because:
    1. We control exactly what data is exposed
    2. Validation rules (minimum lengths after trimming) belong to the API
       contract, not to the table
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MIN_TITLE_LENGTH = 3
MIN_CONTENT_LENGTH = 10


def _clean_title(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_TITLE_LENGTH:
        raise ValueError(f"Title must be at least {MIN_TITLE_LENGTH} characters long")
    return v


def _clean_content(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_CONTENT_LENGTH:
        raise ValueError(f"Content must be at least {MIN_CONTENT_LENGTH} characters long")
    return v


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    What:  Body of POST /api/notes.
    Both fields are required and stored trimmed.
    """
    title: str = Field(max_length=255)
    content: str

    @field_validator("title")
    @classmethod
    def clean_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: str) -> str:
        return _clean_content(v)


class NoteUpdate(BaseModel):
    """
    What:  Body of PUT /api/notes/{id}.
    Omitted fields are left untouched; an empty body is rejected.
    """
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None

    @field_validator("title")
    @classmethod
    def clean_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_title(v)

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_content(v)

    @model_validator(mode="after")
    def at_least_one_field(self) -> "NoteUpdate":
        if self.title is None and self.content is None:
            raise ValueError("No valid fields to update")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Full representation of a note.
    Who:   Every notes endpoint that returns note data.
    """
    id: int = Field(description="Note identifier")
    user_id: int = Field(description="Owner identifier")
    title: str
    content: str
    created_at: datetime = Field(description="When the note was created (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last modification (UTC ISO 8601)")

    model_config = ConfigDict(from_attributes=True)


class NoteListData(BaseModel):
    notes: List[NoteResponse]


class NoteListResponse(BaseModel):
    """GET /api/notes, newest first."""
    success: bool = True
    message: Optional[str] = None
    data: NoteListData


class NoteData(BaseModel):
    note: NoteResponse


class NoteEnvelope(BaseModel):
    """Single-note success envelope (create, read, update)."""
    success: bool = True
    message: Optional[str] = None
    data: NoteData
