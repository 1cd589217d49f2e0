"""
Pagination - renders a ToolPage as a length-aware page object.

Page URLs keep the request's own query string and only swap the page number.
"""

from typing import Any

from fastapi import Request

from app.models.domain import ToolPage

PREVIOUS_LABEL = "&laquo; Previous"
NEXT_LABEL = "Next &raquo;"


def page_url(request: Request, page: int) -> str:
    """URL of `page` for the current request, other query parameters untouched."""
    return str(request.url.include_query_params(page=page))


def paginate(request: Request, page: ToolPage, items: list[Any]) -> dict[str, Any]:
    """
    Build the page object returned by the listing.

    Args:
        request: Incoming request whose URL and query string the links reuse
        page: Page metadata from the service
        items: Already serialized items of this page
    """
    last_page = page.last_page
    prev_url = page_url(request, page.page - 1) if page.page > 1 else None
    next_url = page_url(request, page.page + 1) if page.page < last_page else None

    links: list[dict[str, Any]] = [{"url": prev_url, "label": PREVIOUS_LABEL, "active": False}]
    links.extend(
        {"url": page_url(request, number), "label": str(number), "active": number == page.page}
        for number in range(1, last_page + 1)
    )
    links.append({"url": next_url, "label": NEXT_LABEL, "active": False})

    return {
        "current_page": page.page,
        "data": items,
        "first_page_url": page_url(request, 1),
        "from": page.first_item,
        "last_page": last_page,
        "last_page_url": page_url(request, last_page),
        "links": links,
        "next_page_url": next_url,
        "path": str(request.url.replace(query="")),
        "per_page": page.per_page,
        "prev_page_url": prev_url,
        "to": page.last_item,
        "total": page.total,
    }
