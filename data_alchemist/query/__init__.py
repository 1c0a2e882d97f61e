from .search import SEARCH_PATTERNS, build_row_filter, filter_rows

__all__ = ["SEARCH_PATTERNS", "build_row_filter", "filter_rows"]
