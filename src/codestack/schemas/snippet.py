"""Snippet schemas for API request/response."""

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints, field_validator

from src.codestack.core.validators import MODIFICATION_CODE_REGEX

TagStr = Annotated[str, StringConstraints(min_length=1, max_length=50)]

# Fields an update may change; username, id and timestamps are not among them.
UPDATABLE_FIELDS = ("title", "description", "code", "language", "tags")


class SnippetCreate(BaseModel):
    """Schema for creating a snippet.

    Length checks run on the raw input. Trimming and markup stripping happen
    afterwards in the service, which reports values that end up empty.
    """

    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    code: str = Field(min_length=1)
    language: str = Field(min_length=1, max_length=50)
    tags: list[TagStr] | None = None
    username: str | None = Field(default=None, min_length=1, max_length=50)


class SnippetUpdate(BaseModel):
    """Schema for a partial snippet update.

    A field counts as targeted when its key is present in the payload
    (``model_fields_set``), not when its value is non-null. ``description: null``
    clears the description and ``tags: null`` clears the tags, while ``title``,
    ``code`` and ``language`` may be omitted but not nulled.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    code: str | None = Field(default=None, min_length=1)
    language: str | None = Field(default=None, min_length=1, max_length=50)
    tags: list[TagStr] | None = None
    modification_code: str = Field(pattern=MODIFICATION_CODE_REGEX)

    @field_validator("title", "code", "language", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Value cannot be null when provided")
        return v

    def targeted_fields(self) -> list[str]:
        """Updatable fields whose keys were present in the payload, in column order."""
        return [name for name in UPDATABLE_FIELDS if name in self.model_fields_set]


class ModificationCodeRequest(BaseModel):
    """Body carrying only a modification code (delete, verify)."""

    modification_code: str = Field(pattern=MODIFICATION_CODE_REGEX)


class SnippetSummary(BaseModel):
    """Snippet as shown in list results (without the code body)."""

    id: UUID
    title: str
    description: str | None
    username: str
    language: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SnippetRead(SnippetSummary):
    """Schema for reading a single snippet."""

    code: str


class SnippetCreated(SnippetRead):
    """Create response, the only place the modification code is disclosed."""

    modification_code: str


class VerifyModificationCodeResponse(BaseModel):
    """Result of checking a modification code without acting on it."""

    verified: bool
