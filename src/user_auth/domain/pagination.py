"""Page-window resolution for paginated listings."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageWindow:
    """Resolved 1-based page request with its row offset."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def resolve_page_window(*, page: int | None, limit: int | None) -> PageWindow:
    """Clamp caller-supplied page/limit into a valid window.

    Oversized limits are clamped to ``MAX_PAGE_SIZE`` instead of rejected.
    Pages past the end are kept as-is so callers get an empty slice.
    """

    resolved_page = 1 if page is None or page < 1 else page
    if limit is None:
        resolved_limit = DEFAULT_PAGE_SIZE
    else:
        resolved_limit = min(max(limit, 1), MAX_PAGE_SIZE)
    return PageWindow(page=resolved_page, limit=resolved_limit)
