"""User search: paginated pages, bounded collections and keyset streams."""

import math
from collections.abc import Iterator
from urllib.parse import urlencode

from loguru import logger
from pydantic import BaseModel, Field, TypeAdapter
from sqlalchemy.exc import SQLAlchemyError

from src.user_directory.core.cache.search_cache import SearchCache
from src.user_directory.core.exceptions import OperationFailedError
from src.user_directory.core.services.database.db_session import DbSessionService
from src.user_directory.core.services.search.query_builder import (
    build_search_statement,
    count_statement,
    normalize_query,
)
from src.user_directory.entities.core.user.entity import User
from src.user_directory.entities.core.user.repository import to_entity
from src.user_directory.runtime.config.config_data import SearchConfig

PAGINATED = "paginated"
COLLECTION = "collection"


class PageLinks(BaseModel):
    """Navigation query strings. Each one keeps the search and page size."""

    first: str
    last: str
    prev: str | None = None
    next: str | None = None


class SearchPage(BaseModel):
    """One page of search results with its pagination metadata."""

    items: list[User] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 10
    last_page: int = 1
    query: str = ""
    links: PageLinks

    @classmethod
    def build(
        cls, items: list[User], total: int, page: int, per_page: int, query: str
    ) -> "SearchPage":
        last_page = max(1, math.ceil(total / per_page))
        return cls(
            items=items,
            total=total,
            page=page,
            per_page=per_page,
            last_page=last_page,
            query=query,
            links=PageLinks(
                first=page_link(query, per_page, 1),
                last=page_link(query, per_page, last_page),
                prev=page_link(query, per_page, page - 1) if page > 1 else None,
                next=page_link(query, per_page, page + 1) if page < last_page else None,
            ),
        )

    @classmethod
    def empty(cls, query: str = "", per_page: int = 10, page: int = 1) -> "SearchPage":
        return cls.build([], 0, page, per_page, query)


def page_link(query: str, per_page: int, page: int) -> str:
    params: dict[str, str | int] = {}
    if query:
        params["search"] = query
    params["per_page"] = per_page
    params["page"] = page
    return f"?{urlencode(params)}"


_PAGE_ADAPTER: TypeAdapter[SearchPage] = TypeAdapter(SearchPage)
_USERS_ADAPTER: TypeAdapter[list[User]] = TypeAdapter(list[User])


class UserStream:
    """Restartable lazy iteration over every matching user, oldest id first.

    Rows are read in chunks using the last seen id as cursor, so memory stays
    bounded by ``chunk_size``. Each ``iter()`` starts again from ``after_id``.
    Rows inserted while iterating may or may not be seen.
    """

    def __init__(
        self,
        db_service: DbSessionService,
        query: str | None,
        chunk_size: int = 1000,
        after_id: int = 0,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._db_service = db_service
        self._query = normalize_query(query)
        self._chunk_size = chunk_size
        self._after_id = after_id
        self.last_seen_id = after_id

    @property
    def query(self) -> str:
        return self._query

    def chunks(self) -> Iterator[list[User]]:
        last_id = self._after_id
        self.last_seen_id = last_id
        while True:
            statement = build_search_statement(
                self._query, descending=False, after_id=last_id
            ).limit(self._chunk_size)
            try:
                with self._db_service.get_session() as session:
                    rows = session.exec(statement).all()
                    chunk = [to_entity(user_row, address_row) for user_row, address_row in rows]
            except SQLAlchemyError as e:
                logger.exception("User stream read failed after id {}", last_id)
                raise OperationFailedError() from e

            if not chunk:
                return

            last_id = chunk[-1].id or last_id
            self.last_seen_id = last_id
            yield chunk

            if len(chunk) < self._chunk_size:
                return

    def __iter__(self) -> Iterator[User]:
        for chunk in self.chunks():
            yield from chunk


class UserSearchService:
    """Cached search over users and their addresses.

    Page sizes are clamped here, before any statement is built.
    """

    def __init__(
        self,
        db_service: DbSessionService,
        cache: SearchCache | None = None,
        config: SearchConfig | None = None,
    ):
        self._db_service = db_service
        self._cache = cache
        self._config = config or SearchConfig()

    @property
    def cache(self) -> SearchCache | None:
        return self._cache

    def clamp_per_page(self, per_page: int | None) -> int:
        if per_page is None:
            per_page = self._config.default_per_page
        return min(max(per_page, self._config.min_per_page), self._config.max_per_page)

    def clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            limit = self._config.default_collection_limit
        return min(max(limit, 1), self._config.max_collection_limit)

    async def paginated(
        self, query: str | None, per_page: int | None = None, page: int | None = 1
    ) -> SearchPage:
        """One page of matching users, newest first."""
        q = normalize_query(query)
        size = self.clamp_per_page(per_page)
        page_number = max(page or 1, 1)

        async def compute() -> SearchPage:
            return await self.fetch_page(q, size, page_number)

        if self._cache is None:
            return await compute()

        key = self._cache.make_key(PAGINATED, q, size, page_number)
        return await self._cache.get_or_compute(key, compute, adapter=_PAGE_ADAPTER)

    async def fetch_page(self, query: str | None, per_page: int, page: int) -> SearchPage:
        """Read one page straight from the database, bypassing the cache."""
        q = normalize_query(query)
        offset = (page - 1) * per_page
        statement = build_search_statement(q).offset(offset).limit(per_page)

        try:
            with self._db_service.get_session() as session:
                total = session.exec(count_statement(q)).one()
                rows = session.exec(statement).all()
                items = [to_entity(user_row, address_row) for user_row, address_row in rows]
        except SQLAlchemyError as e:
            logger.exception("Search page read failed for query {!r}", q)
            raise OperationFailedError() from e

        return SearchPage.build(items, total, page, per_page, q)

    async def search_collection(
        self, query: str | None, limit: int | None = None
    ) -> list[User]:
        """At most ``limit`` matching users, newest first, without metadata."""
        q = normalize_query(query)
        size = self.clamp_limit(limit)

        async def compute() -> list[User]:
            statement = build_search_statement(q).limit(size)
            try:
                with self._db_service.get_session() as session:
                    rows = session.exec(statement).all()
                    return [to_entity(user_row, address_row) for user_row, address_row in rows]
            except SQLAlchemyError as e:
                logger.exception("Collection search failed for query {!r}", q)
                raise OperationFailedError() from e

        if self._cache is None:
            return await compute()

        key = self._cache.make_key(COLLECTION, q, size)
        return await self._cache.get_or_compute(key, compute, adapter=_USERS_ADAPTER)

    def stream(
        self, query: str | None, chunk_size: int | None = None, after_id: int = 0
    ) -> UserStream:
        """Lazy keyset iteration over every matching user, oldest id first."""
        return UserStream(
            self._db_service,
            query,
            chunk_size=chunk_size or self._config.stream_chunk_size,
            after_id=after_id,
        )

    async def clear_cache(self, query: str | None = None) -> bool:
        """Best-effort invalidation of cached search results.

        Without a query every tagged search entry is flushed. With a query,
        its collection entry and its first page at the default size are dropped.
        """
        if self._cache is None:
            return False

        q = normalize_query(query)
        if not q:
            flushed = await self._cache.invalidate()
            logger.info("Search cache cleared", flushed=flushed)
            return flushed

        await self._cache.forget(
            self._cache.make_key(COLLECTION, q, self.clamp_limit(None))
        )
        await self._cache.forget(
            self._cache.make_key(PAGINATED, q, self.clamp_per_page(None), 1)
        )
        logger.info("Search cache cleared for query {!r}", q)
        return True
