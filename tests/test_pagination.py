"""Tests for the page object builder."""

from fastapi import Request

from app.api.pagination import NEXT_LABEL, PREVIOUS_LABEL, page_url, paginate
from app.models.domain import ToolPage


def make_request(query: str) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "https",
            "server": ("directory.example", 443),
            "path": "/ai-tools",
            "query_string": query.encode(),
            "headers": [(b"host", b"directory.example")],
        }
    )


def test_page_url_replaces_only_page():
    request = make_request("search=react&page=3")
    assert page_url(request, 4) == "https://directory.example/ai-tools?search=react&page=4"


def test_middle_page():
    request = make_request("per_page=2&page=2")
    page = ToolPage(items=["a", "b"], total=5, page=2, per_page=2)  # type: ignore[list-item]

    result = paginate(request, page, ["a", "b"])

    assert result["path"] == "https://directory.example/ai-tools"
    assert result["last_page"] == 3
    assert result["from"] == 3
    assert result["to"] == 4
    assert result["prev_page_url"].endswith("?per_page=2&page=1")
    assert result["next_page_url"].endswith("?per_page=2&page=3")
    assert [link["label"] for link in result["links"]] == [
        PREVIOUS_LABEL,
        "1",
        "2",
        "3",
        NEXT_LABEL,
    ]
    assert [link["active"] for link in result["links"]] == [False, False, True, False, False]


def test_single_page_has_no_neighbours():
    request = make_request("")
    page = ToolPage(items=[], total=0, page=1, per_page=15)

    result = paginate(request, page, [])

    assert result["prev_page_url"] is None
    assert result["next_page_url"] is None
    assert result["first_page_url"] == "https://directory.example/ai-tools?page=1"
    assert result["last_page_url"] == result["first_page_url"]
    assert result["data"] == []
