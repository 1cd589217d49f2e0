"""Tests for slug derivation."""

import pytest

from app.models.api import SLUG_PATTERN
from app.services.slugs import slugify


@pytest.mark.parametrize(
    "text, expected",
    [
        ("TensorFlow", "tensorflow"),
        ("React Testing Library", "react-testing-library"),
        ("Tailwind CSS", "tailwind-css"),
        ("  OpenAI   API  ", "openai-api"),
        ("Crème Brûlée", "creme-brulee"),
        ("C++ / C#", "c-c"),
        ("already-a-slug", "already-a-slug"),
        ("--edges--", "edges"),
        ("Docker Inc.", "docker-inc"),
    ],
)
def test_slugify(text: str, expected: str):
    assert slugify(text) == expected


def test_result_matches_slug_pattern():
    assert SLUG_PATTERN.match(slugify("Laravel Sanctum 3.x!"))


def test_non_latin_script_yields_empty_slug():
    assert slugify("Иван") == ""
