from cartapi.core.errors import CartNotFound, DuplicateProduct, ItemNotFound, StorageFailure
from cartapi.models import Cart, Item, new_cart
from cartapi.storage import CartStorage, RecordConflict, RecordNotFound, StorageError


class CartService:
    """Business rules of the shopping cart.

    Every operation takes the id of the already authenticated caller. Ownership
    is checked by asking the storage for the cart scoped to that user, so a cart
    owned by someone else is indistinguishable from a missing one.
    """

    def __init__(self, storage: CartStorage):
        self.storage = storage

    def _owned_cart(self, user_id: int, cart_id: int) -> Cart:
        try:
            return self.storage.get_cart(user_id, cart_id)
        except RecordNotFound as exc:
            raise CartNotFound() from exc
        except StorageError as exc:
            raise StorageFailure(str(exc)) from exc

    def create_cart(self, user_id: int) -> Cart:
        """Create and persist a new, empty cart for the user"""
        cart = new_cart(user_id)
        try:
            return self.storage.create_cart(cart)
        except StorageError as exc:
            raise StorageFailure(str(exc)) from exc

    def add_item(self, user_id: int, item: Item) -> Item:
        """Add a product to one of the user's carts.

        A product can be in a cart only once; adding it again raises
        DuplicateProduct rather than merging quantities.
        """
        self._owned_cart(user_id, item.cart_id)

        try:
            self.storage.find_item_by_product(item.cart_id, item.product_id)
        except RecordNotFound:
            pass
        except StorageError as exc:
            raise StorageFailure(str(exc)) from exc
        else:
            raise DuplicateProduct()

        try:
            return self.storage.create_item(item)
        except RecordConflict as exc:
            # A concurrent request inserted the same product after our check
            raise DuplicateProduct() from exc
        except StorageError as exc:
            raise StorageFailure(str(exc)) from exc

    def remove_item(self, user_id: int, item_id: int) -> None:
        """Remove an item from a cart the user owns"""
        try:
            item = self.storage.get_item(item_id)
        except RecordNotFound as exc:
            raise ItemNotFound() from exc
        except StorageError as exc:
            raise StorageFailure(str(exc)) from exc

        self._owned_cart(user_id, item.cart_id)

        try:
            self.storage.remove_item(item.id)
        except StorageError as exc:
            raise StorageFailure(str(exc)) from exc

    def empty_cart(self, user_id: int, cart_id: int) -> None:
        """Remove all items of a cart the user owns, keeping the cart itself"""
        self._owned_cart(user_id, cart_id)

        # Not atomic with the ownership check above
        try:
            self.storage.remove_items_by_cart(cart_id)
        except StorageError as exc:
            raise StorageFailure(str(exc)) from exc
