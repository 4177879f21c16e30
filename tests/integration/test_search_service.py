"""Integration tests for UserSearchService against an in-memory database."""

import pytest

from src.user_directory.core.exceptions import OperationFailedError
from src.user_directory.core.services.search.search_service import (
    SearchPage,
    UserSearchService,
    UserStream,
)
from src.user_directory.entities.core.user.entity import User


def matches(user: User, query: str) -> bool:
    """Reference predicate mirroring the search semantics (case-insensitive LIKE)."""
    q = query.lower()
    address = user.address
    candidates = [
        user.first_name.lower().startswith(q),
        user.last_name.lower().startswith(q),
        q in user.first_name.lower(),
        q in user.last_name.lower(),
        q in user.email.lower(),
        user.email == query,
    ]
    if address is not None:
        candidates += [
            address.country.lower().startswith(q),
            address.city.lower().startswith(q),
            address.post_code == query,
            address.post_code.lower().startswith(q),
            q in address.street.lower(),
        ]
    return any(candidates)


@pytest.fixture
def population(make_user):
    users = [
        make_user("Ada", "Lovelace", "ada@example.com", "UK", "London", "NW1 2DB", "12 St James Sq"),
        make_user("Alan", "Turing", "alan@example.com", "UK", "Manchester", "M13 9PL", "Oxford Rd"),
        make_user("Grace", "Hopper", "grace@navy.mil", "USA", "Arlington", "22202", "Navy Ave"),
        make_user("Edsger", "Dijkstra", "ewd@utexas.edu", "Netherlands", "Nuenen", "5671", "Lindenlaan"),
        make_user("Barbara", "Liskov", "liskov@mit.edu", "USA", "Cambridge", "02139", "Vassar St"),
    ]
    for index in range(20):
        users.append(make_user(f"Filler{index:02d}", "Person", f"filler{index}@example.org"))
    return users


class TestPaginated:
    """Test paginated search."""

    @pytest.mark.asyncio
    async def test_page_size_bound_and_filter(self, search_service, population):
        """Every page holds at most per_page items, all matching the query."""
        for query in ["", "a", "uk", "example", "Filler1", "zzz"]:
            page = await search_service.paginated(query, per_page=10, page=1)

            assert len(page.items) <= 10
            assert all(matches(user, query) for user in page.items) or not query

    @pytest.mark.asyncio
    async def test_per_page_is_clamped(self, search_service, population):
        small = await search_service.paginated("", per_page=1, page=1)
        large = await search_service.paginated("", per_page=500, page=1)

        assert small.per_page == 10
        assert len(small.items) == 10
        assert large.per_page == 50
        assert len(large.items) == len(population)

    @pytest.mark.asyncio
    async def test_metadata_and_links(self, search_service, population):
        """Should report totals and keep the query and page size in links."""
        page = await search_service.paginated("  Person ", per_page=10, page=2)

        assert page.query == "Person"
        assert page.total == 20
        assert page.page == 2
        assert page.last_page == 2
        assert page.links.first == "?search=Person&per_page=10&page=1"
        assert page.links.prev == "?search=Person&per_page=10&page=1"
        assert page.links.next is None
        assert page.links.last == "?search=Person&per_page=10&page=2"

    @pytest.mark.asyncio
    async def test_newest_first(self, search_service, population):
        page = await search_service.paginated("", per_page=10, page=1)
        ids = [user.id for user in page.items]

        assert ids == sorted(ids, reverse=True)
        assert ids[0] == population[-1].id

    @pytest.mark.asyncio
    async def test_page_beyond_end_is_empty(self, search_service, population):
        page = await search_service.paginated("Lovelace", per_page=10, page=5)

        assert page.items == []
        assert page.total == 1

    @pytest.mark.asyncio
    async def test_cached_reads_are_identical(self, search_service, population, make_user):
        """Repeated reads within the TTL return the same payload, even after raw inserts."""
        first = await search_service.paginated("a", per_page=10, page=1)
        make_user("Ava", "Anderson", "ava@example.com")
        second = await search_service.paginated("a", per_page=10, page=1)

        assert second.model_dump_json() == first.model_dump_json()

    @pytest.mark.asyncio
    async def test_fresh_after_ttl(self, search_service, population, make_user, clock):
        await search_service.paginated("Ava", per_page=10, page=1)
        make_user("Ava", "Anderson", "ava@example.com")

        clock.advance(60)
        page = await search_service.paginated("Ava", per_page=10, page=1)

        assert [user.first_name for user in page.items] == ["Ava"]

    @pytest.mark.asyncio
    async def test_matches_address_fields(self, search_service, population):
        by_post_code = await search_service.paginated("22202")
        by_city = await search_service.paginated("Nuen")
        by_street = await search_service.paginated("Vassar")

        assert [u.last_name for u in by_post_code.items] == ["Hopper"]
        assert [u.last_name for u in by_city.items] == ["Dijkstra"]
        assert [u.last_name for u in by_street.items] == ["Liskov"]

    @pytest.mark.asyncio
    async def test_wildcards_match_literally(self, search_service, population):
        page = await search_service.paginated("%")

        assert page.items == []


class TestSearchCollection:
    """Test bounded collection search."""

    @pytest.mark.asyncio
    async def test_unfiltered_returns_up_to_limit(self, search_service, population):
        users = await search_service.search_collection("", 20)

        assert len(users) == 20
        assert len({user.id for user in users}) == 20

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_list(self, search_service):
        assert await search_service.search_collection("", 20) == []

    @pytest.mark.asyncio
    async def test_limit_is_clamped(self, search_service, population):
        assert len(await search_service.search_collection("", 0)) == 1
        assert len(await search_service.search_collection("", 1_000)) == len(population)

    @pytest.mark.asyncio
    async def test_each_user_carries_one_address(self, search_service, population):
        users = await search_service.search_collection("Turing", 20)

        assert len(users) == 1
        assert users[0].address is not None
        assert users[0].address.city == "Manchester"


class TestStream:
    """Test keyset streaming."""

    def test_streams_all_matches_in_id_order(self, search_service, population):
        stream = search_service.stream("", chunk_size=7)

        ids = [user.id for user in stream]

        assert ids == sorted(user.id for user in population)
        assert stream.last_seen_id == ids[-1]

    def test_stream_is_restartable(self, search_service, population):
        stream = search_service.stream("Person", chunk_size=3)

        assert [u.id for u in stream] == [u.id for u in stream]

    def test_chunks_are_bounded(self, search_service, population):
        stream = search_service.stream("", chunk_size=4)

        sizes = [len(chunk) for chunk in stream.chunks()]

        assert max(sizes) <= 4
        assert sum(sizes) == len(population)

    def test_resume_after_id(self, search_service, population):
        cutoff = population[9].id
        stream = search_service.stream("", chunk_size=5, after_id=cutoff)

        ids = [user.id for user in stream]

        assert ids == [user.id for user in population[10:]]

    def test_filtered_stream(self, search_service, population):
        assert [u.last_name for u in search_service.stream("uk")] == ["Lovelace", "Turing"]

    def test_rejects_non_positive_chunk(self, db_service):
        with pytest.raises(ValueError):
            UserStream(db_service, "", chunk_size=0)


class TestClearCache:
    """Test cache invalidation through the service."""

    @pytest.mark.asyncio
    async def test_clear_all(self, search_service, population, make_user):
        await search_service.paginated("Ava")
        make_user("Ava", "Anderson", "ava@example.com")

        assert await search_service.clear_cache() is True

        page = await search_service.paginated("Ava")
        assert page.total == 1

    @pytest.mark.asyncio
    async def test_clear_single_query(self, search_service, population, make_user):
        await search_service.paginated("Ava")
        await search_service.search_collection("Ava")
        await search_service.search_collection("Zed")
        make_user("Ava", "Anderson", "ava@example.com")
        make_user("Zed", "Zulu", "zed@example.com")

        assert await search_service.clear_cache("Ava") is True

        assert (await search_service.paginated("Ava")).total == 1
        assert len(await search_service.search_collection("Ava")) == 1
        assert await search_service.search_collection("Zed") == []

    @pytest.mark.asyncio
    async def test_without_cache(self, db_service, population):
        service = UserSearchService(db_service, cache=None)

        page = await service.paginated("Lovelace")

        assert isinstance(page, SearchPage)
        assert page.total == 1
        assert await service.clear_cache() is False


class TestStorageFailures:
    """Storage errors surface as a generic failure without driver detail."""

    @pytest.mark.asyncio
    async def test_collection_read_failure(self, search_service, broken_database):
        with pytest.raises(OperationFailedError) as exc_info:
            await search_service.search_collection("ada", 20)

        assert str(exc_info.value) == "Operation failed"
        assert "db-internal" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_page_read_failure(self, search_service, broken_database, cache_store):
        with pytest.raises(OperationFailedError):
            await search_service.paginated("ada", per_page=10, page=1)

        assert len(cache_store) == 0

    def test_stream_read_failure(self, search_service, broken_database):
        with pytest.raises(OperationFailedError):
            list(search_service.stream("ada"))
