"""Entity package: Address."""

from .entity import Address, AddressFields
from .table import AddressTable

__all__ = ["Address", "AddressFields", "AddressTable"]
