import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select, delete

from cartapi.models import Cart, Item
from cartapi.storage.base import CartStorage, RecordConflict, RecordNotFound, StorageError

logger = logging.getLogger(__name__)

# The sqlite3 driver raises OverflowError itself when binding an out of range integer
DB_ERRORS = (SQLAlchemyError, OverflowError)


class SQLStorage(CartStorage):
    """Cart storage backed by a SQLModel session."""

    def __init__(self, session: Session):
        self.session = session

    def _commit(self, operation: str, conflict: str = None):
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if conflict:
                raise RecordConflict(f"{operation}: {conflict}") from exc
            logger.error("storage.%s: constraint violated: %s", operation, exc)
            raise StorageError(f"{operation}: {exc}") from exc
        except DB_ERRORS as exc:
            self.session.rollback()
            logger.error("storage.%s: commit failed: %s", operation, exc)
            raise StorageError(f"{operation}: {exc}") from exc

    def _first(self, operation: str, statement):
        try:
            record = self.session.exec(statement).first()
        except DB_ERRORS as exc:
            logger.error("storage.%s: query failed: %s", operation, exc)
            raise StorageError(f"{operation}: {exc}") from exc
        if record is None:
            raise RecordNotFound(operation)
        return record

    def create_cart(self, cart: Cart) -> Cart:
        self.session.add(cart)
        self._commit("create_cart")
        self.session.refresh(cart)
        return cart

    def get_cart(self, user_id: int, cart_id: int) -> Cart:
        # Ownership is part of the predicate so a foreign cart looks like a missing one
        return self._first(
            "get_cart",
            select(Cart).where(Cart.id == cart_id, Cart.user_id == user_id),
        )

    def find_item_by_product(self, cart_id: int, product_id: int) -> Item:
        return self._first(
            "find_item_by_product",
            select(Item).where(Item.cart_id == cart_id, Item.product_id == product_id),
        )

    def create_item(self, item: Item) -> Item:
        self.session.add(item)
        self._commit("create_item", conflict=f"product {item.product_id} already in cart {item.cart_id}")
        self.session.refresh(item)
        return item

    def get_item(self, item_id: int) -> Item:
        return self._first("get_item", select(Item).where(Item.id == item_id))

    def remove_item(self, item_id: int) -> None:
        try:
            self.session.exec(delete(Item).where(Item.id == item_id))
        except DB_ERRORS as exc:
            self.session.rollback()
            logger.error("storage.remove_item: delete failed: %s", exc)
            raise StorageError(f"remove_item: {exc}") from exc
        self._commit("remove_item")

    def remove_items_by_cart(self, cart_id: int) -> None:
        try:
            self.session.exec(delete(Item).where(Item.cart_id == cart_id))
        except DB_ERRORS as exc:
            self.session.rollback()
            logger.error("storage.remove_items_by_cart: delete failed: %s", exc)
            raise StorageError(f"remove_items_by_cart: {exc}") from exc
        self._commit("remove_items_by_cart")
