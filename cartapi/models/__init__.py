# Import all models to register them with SQLModel
from cartapi.models.cart import Cart, Item, new_cart

__all__ = [
    "Cart",
    "Item",
    "new_cart",
]
