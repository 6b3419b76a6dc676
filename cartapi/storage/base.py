"""Storage contract the cart service depends on."""
from abc import ABC, abstractmethod

from cartapi.models import Cart, Item


class StorageError(Exception):
    """Any failure of the storage backend."""


class RecordNotFound(StorageError):
    """The requested record does not exist, or is not visible to the caller."""


class RecordConflict(StorageError):
    """The record violates a uniqueness constraint of the store."""


class CartStorage(ABC):
    @abstractmethod
    def create_cart(self, cart: Cart) -> Cart:
        """Persist a new cart, filling in its id and timestamps."""

    @abstractmethod
    def get_cart(self, user_id: int, cart_id: int) -> Cart:
        """Return the cart only if it exists and belongs to user_id, else raise RecordNotFound."""

    @abstractmethod
    def find_item_by_product(self, cart_id: int, product_id: int) -> Item:
        ...

    @abstractmethod
    def create_item(self, item: Item) -> Item:
        """Persist a new item, raising RecordConflict if its product is already in the cart."""

    @abstractmethod
    def get_item(self, item_id: int) -> Item:
        ...

    @abstractmethod
    def remove_item(self, item_id: int) -> None:
        ...

    @abstractmethod
    def remove_items_by_cart(self, cart_id: int) -> None:
        ...
