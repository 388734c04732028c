import logging
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response

from event_cart.api.auth import current_user_id
from event_cart.store import cart_queries as store

from .cart_contracts import (
    AddCartItemRequest,
    CartDataResponse,
    CartResponse,
    MessageResponse,
    PatchCartItemRequest,
)

logger = logging.getLogger(__name__)

cart_router = APIRouter(prefix="/cart")

UserId = Annotated[str, Depends(current_user_id)]


def _cart_response(user_id: str, message: str | None = None) -> CartResponse:
    return CartResponse(
        message=message,
        data=CartDataResponse.from_snapshot(store.get_snapshot(user_id)),
    )


@cart_router.get(
    "",
    responses={
        HTTPStatus.OK: {"description": "Successfully returned the caller's cart"},
        HTTPStatus.UNAUTHORIZED: {"description": "No bearer token was supplied"},
    },
)
async def get_cart(user_id: UserId) -> CartResponse:
    return _cart_response(user_id)


@cart_router.post(
    "",
    status_code=HTTPStatus.CREATED,
    responses={
        HTTPStatus.CREATED: {"description": "Item added to cart"},
        HTTPStatus.OK: {"description": "Existing cart item for the same product was updated"},
        HTTPStatus.BAD_REQUEST: {"description": "Customization is not valid for the product"},
        HTTPStatus.NOT_FOUND: {"description": "Product was not found"},
    },
)
async def add_to_cart(user_id: UserId, info: AddCartItemRequest, response: Response) -> CartResponse:
    try:
        entity, created = store.add_item(user_id, info.as_new_cart_item_info())
    except store.ProductNotFound as exc:
        raise HTTPException(HTTPStatus.NOT_FOUND, str(exc)) from exc
    except store.CartValidationError as exc:
        raise HTTPException(HTTPStatus.BAD_REQUEST, str(exc)) from exc

    response.headers["location"] = f"/cart/{entity.id}"
    if created:
        logger.info("cart item %s created for %s", entity.id, user_id)
        return _cart_response(user_id, "Item added to cart successfully")

    response.status_code = HTTPStatus.OK
    logger.info("cart item %s merged for %s", entity.id, user_id)
    return _cart_response(user_id, "Cart item updated successfully")


@cart_router.put(
    "/{item_id}",
    responses={
        HTTPStatus.OK: {"description": "Successfully updated cart item"},
        HTTPStatus.BAD_REQUEST: {"description": "Customization is not valid for the product"},
        HTTPStatus.NOT_FOUND: {"description": "Cart item was not found"},
    },
)
async def update_cart_item(user_id: UserId, item_id: int, info: PatchCartItemRequest) -> CartResponse:
    try:
        entity = store.update_item(user_id, item_id, info.as_patch_cart_item_info())
    except store.CartValidationError as exc:
        raise HTTPException(HTTPStatus.BAD_REQUEST, str(exc)) from exc

    if entity is None:
        raise HTTPException(HTTPStatus.NOT_FOUND, "Cart item not found")

    return _cart_response(user_id, "Cart item updated successfully")


@cart_router.delete(
    "/{item_id}",
    responses={
        HTTPStatus.OK: {"description": "Successfully removed cart item"},
        HTTPStatus.NOT_FOUND: {"description": "Cart item was not found"},
    },
)
async def remove_from_cart(user_id: UserId, item_id: int) -> MessageResponse:
    if not store.remove_item(user_id, item_id):
        raise HTTPException(HTTPStatus.NOT_FOUND, "Cart item not found")
    return MessageResponse(message="Item removed from cart successfully")


@cart_router.delete("")
async def clear_cart(user_id: UserId) -> MessageResponse:
    removed = store.clear(user_id)
    logger.info("cleared %d cart items for %s", removed, user_id)
    return MessageResponse(message="Cart cleared successfully")
