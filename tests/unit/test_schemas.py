"""Tests for snippet request/response schemas."""

import pytest
from pydantic import ValidationError

from src.codestack.schemas import (
    SnippetCreate,
    SnippetCreated,
    SnippetRead,
    SnippetSummary,
    SnippetUpdate,
)
from tests.factories import SnippetFactory

pytestmark = pytest.mark.unit

CODE = "abcdef123456"


def _error_fields(exc: ValidationError) -> set[str]:
    return {str(error["loc"][0]) for error in exc.errors() if error["loc"]}


class TestSnippetCreate:
    def test_minimal_payload(self) -> None:
        data = SnippetCreate.model_validate({"title": "T", "code": "x", "language": "go"})

        assert data.description is None
        assert data.tags is None
        assert data.username is None

    def test_reports_every_invalid_field(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SnippetCreate.model_validate(
                {
                    "title": "",
                    "code": "",
                    "language": "x" * 51,
                    "description": "d" * 1001,
                    "tags": ["ok", ""],
                    "username": "u" * 51,
                }
            )

        assert _error_fields(exc_info.value) == {
            "title",
            "code",
            "language",
            "description",
            "tags",
            "username",
        }

    def test_missing_required_fields(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SnippetCreate.model_validate({})

        assert _error_fields(exc_info.value) == {"title", "code", "language"}

    @pytest.mark.parametrize("tags", ["python", [1, 2], [["nested"]], {"a": 1}])
    def test_tags_must_be_list_of_strings(self, tags: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SnippetCreate.model_validate(
                {"title": "T", "code": "x", "language": "go", "tags": tags}
            )

        assert _error_fields(exc_info.value) == {"tags"}

    def test_title_boundary(self) -> None:
        SnippetCreate.model_validate({"title": "t" * 255, "code": "x", "language": "go"})
        with pytest.raises(ValidationError):
            SnippetCreate.model_validate({"title": "t" * 256, "code": "x", "language": "go"})

    def test_title_must_be_a_string(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SnippetCreate.model_validate({"title": 12, "code": "x", "language": "go"})

        assert _error_fields(exc_info.value) == {"title"}


class TestSnippetUpdate:
    def test_modification_code_is_required(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SnippetUpdate.model_validate({"title": "New"})

        assert _error_fields(exc_info.value) == {"modification_code"}

    @pytest.mark.parametrize("code", ["short", "abcdef12345!", "abcdef1234567", 123456789012])
    def test_modification_code_format(self, code: object) -> None:
        with pytest.raises(ValidationError):
            SnippetUpdate.model_validate({"modification_code": code})

    def test_targeted_fields_follow_key_presence(self) -> None:
        data = SnippetUpdate.model_validate(
            {"modification_code": CODE, "description": None, "tags": None}
        )

        assert data.targeted_fields() == ["description", "tags"]

    def test_username_is_not_updatable(self) -> None:
        data = SnippetUpdate.model_validate({"modification_code": CODE, "username": "Someone"})

        assert data.targeted_fields() == []

    @pytest.mark.parametrize("field", ["title", "code", "language"])
    def test_required_text_fields_cannot_be_nulled(self, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SnippetUpdate.model_validate({"modification_code": CODE, field: None})

        assert _error_fields(exc_info.value) == {field}

    def test_empty_description_is_allowed(self) -> None:
        data = SnippetUpdate.model_validate({"modification_code": CODE, "description": ""})

        assert data.targeted_fields() == ["description"]


class TestResponseSchemas:
    def test_read_hides_modification_code(self) -> None:
        snippet = SnippetFactory.build()

        dumped = SnippetRead.model_validate(snippet).model_dump()

        assert "modification_code" not in dumped
        assert dumped["code"] == snippet.code

    def test_created_discloses_modification_code(self) -> None:
        snippet = SnippetFactory.build()

        dumped = SnippetCreated.model_validate(snippet).model_dump()

        assert dumped["modification_code"] == snippet.modification_code

    def test_summary_omits_code(self) -> None:
        dumped = SnippetSummary.model_validate(SnippetFactory.build()).model_dump()

        assert "code" not in dumped
        assert "modification_code" not in dumped
