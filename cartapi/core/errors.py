class CartError(Exception):
    """Base class of the errors the cart service raises."""

    message = "cart error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class InvalidOwner(CartError):
    message = "userID is not valid"


class CartNotFound(CartError):
    message = "cart not found"


class ItemNotFound(CartError):
    message = "item not found"


class DuplicateProduct(CartError):
    message = "product is already in the cart"


class StorageFailure(CartError):
    message = "storage failure"
