from .query_builder import build_search_statement, count_statement, normalize_query
from .search_service import PageLinks, SearchPage, UserSearchService, UserStream

__all__ = [
    "PageLinks",
    "SearchPage",
    "UserSearchService",
    "UserStream",
    "build_search_statement",
    "count_statement",
    "normalize_query",
]
