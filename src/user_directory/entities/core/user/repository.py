"""Data-access layer for users and their addresses."""

from sqlmodel import Session, select

from src.user_directory.entities.core._base import utcnow
from src.user_directory.entities.core.address.entity import Address, AddressFields
from src.user_directory.entities.core.address.table import AddressTable
from src.user_directory.entities.core.user.entity import User, UserFields
from src.user_directory.entities.core.user.table import UserTable


def to_entity(user_row: UserTable, address_row: AddressTable | None) -> User:
    """Build a User entity from a user row and its optional address row."""
    address = (
        Address.model_validate(address_row, from_attributes=True)
        if address_row is not None
        else None
    )
    return User(
        id=user_row.id,
        first_name=user_row.first_name,
        last_name=user_row.last_name,
        email=user_row.email,
        created_at=user_row.created_at,
        updated_at=user_row.updated_at,
        address=address,
    )


class UserRepository:
    """Row-level access to users. Transactions are owned by the caller."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: int) -> User | None:
        statement = (
            select(UserTable, AddressTable)
            .outerjoin(AddressTable, AddressTable.user_id == UserTable.id)
            .where(UserTable.id == user_id)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        user_row, address_row = row
        return to_entity(user_row, address_row)

    def create(self, fields: UserFields, address: AddressFields) -> User:
        """Insert the user row, then the dependent address row."""
        user_row = UserTable(**fields.model_dump(include=set(UserFields.model_fields)))
        self._session.add(user_row)
        self._session.flush()

        address_row = AddressTable(user_id=user_row.id, **address.model_dump())
        self._session.add(address_row)
        self._session.flush()

        self._session.refresh(user_row)
        self._session.refresh(address_row)
        return to_entity(user_row, address_row)

    def update(
        self, user_id: int, fields: UserFields, address: AddressFields
    ) -> User | None:
        """Update the user and its address, creating the address if absent.

        Returns None when the user does not exist.
        """
        user_row = self._session.get(UserTable, user_id)
        if user_row is None:
            return None

        now = utcnow()
        for name, value in fields.model_dump(include=set(UserFields.model_fields)).items():
            setattr(user_row, name, value)
        user_row.updated_at = now
        self._session.add(user_row)

        address_row = self._session.exec(
            select(AddressTable).where(AddressTable.user_id == user_id)
        ).first()
        if address_row is None:
            address_row = AddressTable(user_id=user_id, **address.model_dump())
        else:
            for name, value in address.model_dump().items():
                setattr(address_row, name, value)
            address_row.updated_at = now
        self._session.add(address_row)
        self._session.flush()

        self._session.refresh(user_row)
        self._session.refresh(address_row)
        return to_entity(user_row, address_row)

    def delete(self, user_id: int) -> bool:
        """Hard delete a user. The address row goes with it via ON DELETE CASCADE."""
        user_row = self._session.get(UserTable, user_id)
        if user_row is None:
            return False

        self._session.delete(user_row)
        self._session.flush()
        return True
