"""Snippet model - the single persisted entity."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlmodel import Field, SQLModel

from src.codestack.models.base import utc_now


class Snippet(SQLModel, table=True):
    """A shared code snippet.

    ``modification_code`` is the only credential for later updates and
    deletes. It is handed out once, in the create response.
    """

    __tablename__ = "code_snippets"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=255)
    description: str | None = Field(default=None, sa_type=Text)
    username: str = Field(max_length=100, index=True)
    language: str = Field(max_length=50, index=True)
    tags: list[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text), nullable=True))
    code: str = Field(sa_type=Text)
    modification_code: str = Field(max_length=64, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
