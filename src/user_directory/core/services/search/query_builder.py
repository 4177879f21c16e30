"""Search statement construction for the user directory.

One free-text query is matched against user and address columns with an OR
of exact, prefix and substring predicates. LIKE wildcards in the query are
escaped so ``%`` and ``_`` match literally.
"""

from sqlalchemy import ColumnElement, func, or_
from sqlmodel import col, select
from sqlmodel.sql.expression import Select, SelectOfScalar

from src.user_directory.entities.core.address.table import AddressTable
from src.user_directory.entities.core.user.table import UserTable


def normalize_query(query: str | None) -> str:
    """Trim the raw query; None and whitespace-only become the empty string."""
    return (query or "").strip()


def search_predicate(query: str | None) -> ColumnElement[bool] | None:
    """OR of every column match for ``query``, or None when unfiltered."""
    q = normalize_query(query)
    if not q:
        return None

    return or_(
        col(UserTable.email) == q,
        col(UserTable.first_name).startswith(q, autoescape=True),
        col(UserTable.last_name).startswith(q, autoescape=True),
        col(UserTable.first_name).contains(q, autoescape=True),
        col(UserTable.last_name).contains(q, autoescape=True),
        col(UserTable.email).contains(q, autoescape=True),
        col(AddressTable.country).startswith(q, autoescape=True),
        col(AddressTable.city).startswith(q, autoescape=True),
        col(AddressTable.post_code) == q,
        col(AddressTable.post_code).startswith(q, autoescape=True),
        col(AddressTable.street).contains(q, autoescape=True),
    )


def build_search_statement(
    query: str | None,
    *,
    descending: bool = True,
    after_id: int | None = None,
) -> Select[tuple[UserTable, AddressTable]]:
    """Select users joined to their optional address, filtered by ``query``.

    Args:
        query: Free-text search; empty means every user.
        descending: Newest ids first when True, oldest first otherwise.
        after_id: Keyset cursor, only rows with a greater id are returned.
    """
    statement = select(UserTable, AddressTable).outerjoin(
        AddressTable, col(AddressTable.user_id) == col(UserTable.id)
    )

    predicate = search_predicate(query)
    if predicate is not None:
        statement = statement.where(predicate)
    if after_id is not None:
        statement = statement.where(col(UserTable.id) > after_id)

    order = col(UserTable.id).desc() if descending else col(UserTable.id).asc()
    return statement.order_by(order)


def count_statement(query: str | None) -> SelectOfScalar[int]:
    """Number of users matching ``query``."""
    statement = (
        select(func.count())
        .select_from(UserTable)
        .outerjoin(AddressTable, col(AddressTable.user_id) == col(UserTable.id))
    )
    predicate = search_predicate(query)
    if predicate is not None:
        statement = statement.where(predicate)
    return statement
