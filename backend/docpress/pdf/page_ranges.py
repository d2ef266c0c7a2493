"""
DocPress — Page range parsing for PDF splitting.

Accepts "1,3,5-7,10-15" style specs, 1-indexed and inclusive. A single
bad token rejects the whole spec.
"""

from __future__ import annotations

from docpress.errors import InvalidPageRangeError


def _page_number(text: str, token: str) -> int:
    text = text.strip()
    if not text.isdecimal():
        raise InvalidPageRangeError(token, "not a page number")
    return int(text)


def parse_page_ranges(spec: str, total_pages: int) -> list[int]:
    """Return the sorted, de-duplicated page numbers selected by ``spec``."""
    if not spec or not spec.strip():
        raise InvalidPageRangeError(spec or "", "page ranges must be specified")

    pages: set[int] = set()
    for raw in spec.split(","):
        token = raw.strip()
        if "-" in token:
            parts = token.split("-")
            if len(parts) != 2:
                raise InvalidPageRangeError(token, "expected START-END")
            start = _page_number(parts[0], token)
            end = _page_number(parts[1], token)
            if start > end:
                raise InvalidPageRangeError(token, "start is after end")
            if start < 1 or end > total_pages:
                raise InvalidPageRangeError(token, f"document has {total_pages} pages")
            pages.update(range(start, end + 1))
        else:
            page = _page_number(token, token)
            if page < 1 or page > total_pages:
                raise InvalidPageRangeError(token, f"document has {total_pages} pages")
            pages.add(page)

    return sorted(pages)
