import logging
from fastapi import APIRouter, Depends, Path, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlmodel import Session

from cartapi.core import jsonerror
from cartapi.core.errors import CartNotFound, DuplicateProduct, InvalidOwner, ItemNotFound, StorageFailure
from cartapi.core.monitoring import ERROR_500_COUNTER, MetricsSink
from cartapi.db.session import get_session
from cartapi.models import Item
from cartapi.routers.auth import get_current_user_id
from cartapi.services.cart import CartService
from cartapi.storage import SQLStorage

logger = logging.getLogger(__name__)

router = APIRouter()

# Ids are stored as signed 64-bit integers
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


class CartRead(BaseModel):
    id: int
    user_id: int


class ItemCreate(BaseModel):
    product_id: int = Field(ge=INT64_MIN, le=INT64_MAX)
    quantity: int = Field(ge=1, le=INT64_MAX)
    # Total price of the line
    price: float


class ItemRead(BaseModel):
    id: int
    product_id: int
    cart_id: int
    quantity: int
    price: float


def get_cart_service(session: Session = Depends(get_session)) -> CartService:
    return CartService(SQLStorage(session))


def get_metrics(request: Request) -> MetricsSink:
    return request.app.state.metrics


def _internal_error(metrics: MetricsSink, method: str, exc: StorageFailure, details: str) -> JSONResponse:
    logger.error("%s: service %s", method, exc)
    metrics.increment(ERROR_500_COUNTER, labels={"method": method, "reason": "service"})
    return jsonerror.internal_error(details)


@router.post(
    "/carts",
    status_code=status.HTTP_201_CREATED,
    response_model=CartRead,
    responses={422: {"model": jsonerror.ErrorResponse}, 500: {"model": jsonerror.ErrorResponse}},
)
def create_cart(
    user_id: int = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
    metrics: MetricsSink = Depends(get_metrics),
):
    """Create an empty cart for the caller"""
    try:
        cart = service.create_cart(user_id)
    except InvalidOwner:
        return jsonerror.invalid_params("user is invalid")
    except StorageFailure as exc:
        return _internal_error(metrics, "createCart", exc, "cannot create cart")
    return CartRead(id=cart.id, user_id=cart.user_id)


@router.post(
    "/carts/{cart_id}/items",
    status_code=status.HTTP_201_CREATED,
    response_model=ItemRead,
    responses={
        400: {"model": jsonerror.ErrorResponse},
        404: {"model": jsonerror.ErrorResponse},
        500: {"model": jsonerror.ErrorResponse},
    },
)
def add_item(
    item_in: ItemCreate,
    cart_id: int = Path(ge=INT64_MIN, le=INT64_MAX),
    user_id: int = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
    metrics: MetricsSink = Depends(get_metrics),
):
    """Add a product to the caller's cart"""
    item = Item(
        cart_id=cart_id,
        product_id=item_in.product_id,
        quantity=item_in.quantity,
        price=item_in.price,
    )
    try:
        item = service.add_item(user_id, item)
    except CartNotFound:
        return jsonerror.not_found("cart does not exist")
    except DuplicateProduct:
        return jsonerror.bad_request("an item with the same product exists in the cart")
    except StorageFailure as exc:
        return _internal_error(metrics, "addItem", exc, "could not add item to cart")
    return ItemRead(
        id=item.id,
        product_id=item.product_id,
        cart_id=item.cart_id,
        quantity=item.quantity,
        price=item.price,
    )


@router.delete(
    "/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": jsonerror.ErrorResponse}, 500: {"model": jsonerror.ErrorResponse}},
)
def remove_item(
    item_id: int = Path(ge=INT64_MIN, le=INT64_MAX),
    user_id: int = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
    metrics: MetricsSink = Depends(get_metrics),
):
    """Remove a single item from the caller's cart"""
    try:
        service.remove_item(user_id, item_id)
    except ItemNotFound:
        return jsonerror.not_found("item does not exist")
    except CartNotFound:
        return jsonerror.not_found("cart does not exist")
    except StorageFailure as exc:
        return _internal_error(metrics, "removeItem", exc, "could not remove item")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# DELETE on the items collection reads better than a PUT of an empty
# state or an /empty command endpoint
@router.delete(
    "/carts/{cart_id}/items",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": jsonerror.ErrorResponse}, 500: {"model": jsonerror.ErrorResponse}},
)
def empty_cart(
    cart_id: int = Path(ge=INT64_MIN, le=INT64_MAX),
    user_id: int = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
    metrics: MetricsSink = Depends(get_metrics),
):
    """Remove every item from the caller's cart"""
    try:
        service.empty_cart(user_id, cart_id)
    except CartNotFound:
        return jsonerror.not_found("cart does not exist")
    except StorageFailure as exc:
        return _internal_error(metrics, "emptyCart", exc, "could not empty cart")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
