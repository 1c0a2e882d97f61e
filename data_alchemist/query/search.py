from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from ..models.dataset import Row
from ..validation.coercion import display_text, to_number, to_text

"""Natural-language search over dataset rows.

This is an ordered regex table, not a grammar. The lower-cased query is
matched against each pattern in turn; the first pattern found anywhere in the
query wins and is the only filter applied. When no pattern matches, rows are
kept if any of their stringified values contains the query.

Numeric filters compare the coerced cell value; non-numeric or missing cells
coerce to NaN and never pass a > / < comparison.
"""

__all__ = [
    "SearchPattern",
    "SEARCH_PATTERNS",
    "build_row_filter",
    "filter_rows",
]

RowFilter = Callable[[Row], bool]


@dataclass(frozen=True)
class SearchPattern:
    name: str
    regex: re.Pattern[str]
    make_filter: Callable[[str], RowFilter]


def _greater(column: str) -> Callable[[str], RowFilter]:
    def make(value: str) -> RowFilter:
        threshold = int(value)
        return lambda row: to_number(row.get(column)) > threshold
    return make


def _less(column: str) -> Callable[[str], RowFilter]:
    def make(value: str) -> RowFilter:
        threshold = int(value)
        return lambda row: to_number(row.get(column)) < threshold
    return make


def _first_text(row: Row, *columns: str) -> str:
    # 先頭の非空列を採用 (GroupTag が空なら WorkerGroup)
    for column in columns:
        text = to_text(row.get(column))
        if text:
            return text
    return ""


def _group_filter(group: str) -> RowFilter:
    needle = group.lower()
    return lambda row: needle in _first_text(row, "GroupTag", "WorkerGroup").lower()


def _skills_filter(skill: str) -> RowFilter:
    needle = skill.strip().lower()
    return lambda row: needle in _first_text(row, "Skills", "RequiredSkills").lower()


def _ascii(pattern: str) -> re.Pattern[str]:
    # \w / \d は ASCII のみ
    return re.compile(pattern, re.ASCII)


SEARCH_PATTERNS: tuple[SearchPattern, ...] = (
    SearchPattern("priority_greater", _ascii(r"priority\s*>\s*(\d+)"), _greater("PriorityLevel")),
    SearchPattern("priority_less", _ascii(r"priority\s*<\s*(\d+)"), _less("PriorityLevel")),
    SearchPattern("duration_greater", _ascii(r"duration\s*>\s*(\d+)"), _greater("Duration")),
    SearchPattern("duration_less", _ascii(r"duration\s*<\s*(\d+)"), _less("Duration")),
    SearchPattern("group_equals", _ascii(r"group\s*=\s*(\w+)"), _group_filter),
    SearchPattern("skills_contains", _ascii(r"skills\s*=\s*([^,]+)"), _skills_filter),
)


def _substring_filter(needle: str) -> RowFilter:
    def keep(row: Row) -> bool:
        return any(needle in display_text(v).lower() for v in row.values())
    return keep


def build_row_filter(query: str) -> tuple[str, RowFilter]:
    """Resolve a query into (pattern name, predicate).

    The pattern name is "text" for the substring fallback.
    """
    lowered = query.lower()
    for pattern in SEARCH_PATTERNS:
        match = pattern.regex.search(lowered)
        if match:
            return pattern.name, pattern.make_filter(match.group(1))
    return "text", _substring_filter(lowered)


def filter_rows(query: str, rows: list[Row]) -> list[Row]:
    """Filter rows with a free-text query.

    An empty or whitespace-only query (or no rows) returns the input list
    itself, unchanged.
    """
    if not query.strip() or not rows:
        return rows
    _, keep = build_row_filter(query)
    return [row for row in rows if keep(row)]
