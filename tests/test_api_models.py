"""
Tests for API request models and error flattening.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.models.api import (
    NOT_NULL_MESSAGE,
    SLUG_MESSAGE,
    AccessLevel,
    LoginRequest,
    RoleCreate,
    TagCreate,
    ToolCreate,
    ToolUpdate,
    field_errors,
)

VALID_TOOL = {
    "name": "LangChain",
    "description": "Framework for LLM applications",
    "tool_type": "framework",
    "user_id": 1,
}


def errors_of(model: type, data: dict) -> dict[str, list[str]]:
    with pytest.raises(PydanticValidationError) as exc_info:
        model.model_validate(data)
    return field_errors(exc_info.value.errors())


class TestFieldErrors:
    """Tests for field_errors flattening."""

    def test_drops_location_prefix(self):
        errors = field_errors([{"loc": ("body", "rating"), "msg": "Too high"}])
        assert errors == {"rating": ["Too high"]}

    def test_joins_nested_locations(self):
        errors = field_errors([{"loc": ("body", "roles", 1, "access_level"), "msg": "Bad"}])
        assert errors == {"roles.1.access_level": ["Bad"]}

    def test_strips_value_error_prefix(self):
        errors = field_errors([{"loc": ("slug",), "msg": "Value error, Nope."}])
        assert errors == {"slug": ["Nope."]}

    def test_groups_and_deduplicates(self):
        errors = field_errors(
            [
                {"loc": ("name",), "msg": "A"},
                {"loc": ("name",), "msg": "A"},
                {"loc": ("name",), "msg": "B"},
            ]
        )
        assert errors == {"name": ["A", "B"]}

    def test_location_only_prefix_kept(self):
        """A whole-body error keeps its location name."""
        assert field_errors([{"loc": ("body",), "msg": "Field required"}]) == {
            "body": ["Field required"]
        }


class TestToolCreate:
    """Tests for the create payload."""

    def test_minimal_payload(self):
        tool = ToolCreate.model_validate(VALID_TOOL)
        assert tool.tool_type.value == "framework"
        assert tool.slug is None
        assert tool.rating is None

    def test_required_fields(self):
        errors = errors_of(ToolCreate, {})
        assert set(errors) == {"name", "description", "tool_type", "user_id"}

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, rating: int):
        assert "rating" in errors_of(ToolCreate, {**VALID_TOOL, "rating": rating})

    def test_rating_bounds_accepted(self):
        assert ToolCreate.model_validate({**VALID_TOOL, "rating": 5}).rating == 5
        assert ToolCreate.model_validate({**VALID_TOOL, "rating": 1}).rating == 1

    def test_unknown_tool_type(self):
        assert "tool_type" in errors_of(ToolCreate, {**VALID_TOOL, "tool_type": "plugin"})

    def test_name_too_long(self):
        assert "name" in errors_of(ToolCreate, {**VALID_TOOL, "name": "x" * 256})

    def test_invalid_slug(self):
        errors = errors_of(ToolCreate, {**VALID_TOOL, "slug": "Not A Slug"})
        assert errors["slug"] == [SLUG_MESSAGE]

    def test_invalid_url(self):
        errors = errors_of(ToolCreate, {**VALID_TOOL, "github_url": "github.com/foo"})
        assert errors["github_url"] == ["The value must be a valid URL."]

    def test_url_kept_verbatim(self):
        tool = ToolCreate.model_validate({**VALID_TOOL, "url": "https://langchain.com"})
        assert tool.url == "https://langchain.com"

    def test_invalid_author_email(self):
        assert "author_email" in errors_of(
            ToolCreate, {**VALID_TOOL, "author_email": "not-an-email"}
        )

    def test_tag_too_long(self):
        errors = errors_of(ToolCreate, {**VALID_TOOL, "tags": ["ok", "x" * 51]})
        assert "tags.1" in errors

    def test_negative_usage_limit(self):
        assert "usage_limit" in errors_of(ToolCreate, {**VALID_TOOL, "usage_limit": -1})

    def test_role_link_defaults_to_read(self):
        tool = ToolCreate.model_validate({**VALID_TOOL, "roles": [{"role_id": 2}]})
        assert tool.roles is not None
        assert tool.roles[0].access_level == AccessLevel.READ

    def test_unknown_fields_ignored(self):
        tool = ToolCreate.model_validate({**VALID_TOOL, "featured": True})
        assert not hasattr(tool, "featured")

    @pytest.mark.parametrize("field", ["name", "description"])
    def test_blank_required_text_rejected(self, field: str):
        assert field in errors_of(ToolCreate, {**VALID_TOOL, field: "   \t "})

    def test_surrounding_whitespace_trimmed(self):
        tool = ToolCreate.model_validate(
            {**VALID_TOOL, "name": "  LangChain ", "team": " Platform\n"}
        )
        assert tool.name == "LangChain"
        assert tool.team == "Platform"


class TestToolUpdate:
    """Tests for the partial update payload."""

    def test_empty_payload(self):
        update = ToolUpdate.model_validate({})
        assert update.model_fields_set == set()

    def test_only_present_fields_set(self):
        update = ToolUpdate.model_validate({"rating": 3, "team": None})
        assert update.model_fields_set == {"rating", "team"}

    @pytest.mark.parametrize("field", ["name", "description", "tool_type", "slug", "status"])
    def test_required_columns_reject_null(self, field: str):
        assert errors_of(ToolUpdate, {field: None}) == {field: [NOT_NULL_MESSAGE]}

    def test_rating_still_validated(self):
        assert "rating" in errors_of(ToolUpdate, {"rating": 6})

    def test_blank_name_rejected(self):
        assert "name" in errors_of(ToolUpdate, {"name": "  "})


class TestOtherRequests:
    """Tests for login and taxonomy request bodies."""

    def test_login_accepts_local_domains(self):
        request = LoginRequest(email="ivan@admin.local", password="password")
        assert request.email == "ivan@admin.local"

    def test_login_rejects_non_email(self):
        with pytest.raises(PydanticValidationError):
            LoginRequest(email="ivan", password="password")

    def test_tag_defaults(self):
        tag = TagCreate(name="Vision")
        assert tag.slug is None
        assert tag.is_active is True

    def test_blank_taxonomy_name_rejected(self):
        assert "name" in errors_of(TagCreate, {"name": "   "})

    def test_role_permissions_default_empty(self):
        assert RoleCreate(name="Auditor").permissions == []

    def test_taxonomy_slug_checked(self):
        assert errors_of(TagCreate, {"name": "Vision", "slug": "Vision!"}) == {
            "slug": [SLUG_MESSAGE]
        }
