from typing import Annotated
from fastapi import APIRouter, Depends, Form
from sqlalchemy.exc import SQLAlchemyError
import logging

from .service import CartService, PRODUCT_NOT_FOUND_MESSAGE
from ..core.exceptions import CartQuantityError, ErrorCode
from ..core.middleware.csrf import verify_csrf, verify_csrf_json
from ..core.middleware.request_context import AuthContext, JsonAuthContext, RequestContext, redirect
from ..utils.identifiers import parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cart"])

UPDATE_FAILED_MESSAGE = "Updating quantity failed"

ProductIdField = Annotated[str, Form(alias="productId")]


def render_cart(ctx: RequestContext, path: str = "/cart"):
    cart = CartService.view_cart(ctx.user)
    return ctx.render(
        path,
        "Your Cart",
        cart_items=cart.items,
        total_sum=cart.total_sum,
        cart_error_msg=ctx.pop_flash("cartError"),
    )


@router.get("/cart")
async def get_cart(ctx: AuthContext):
    return render_cart(ctx)


@router.post("/add-to-cart", dependencies=[Depends(verify_csrf)])
async def add_to_cart(ctx: AuthContext, product_id: ProductIdField):
    pid = parse_uuid(product_id)
    if pid is None or not CartService.add_to_cart(ctx.db, ctx.user, pid):
        return redirect("/products")
    return redirect("/cart")


@router.post("/add-product-quantity/{product_id}", dependencies=[Depends(verify_csrf_json)])
async def add_product_quantity(product_id: str, ctx: JsonAuthContext):
    """Raise a cart line by one, up to the product's stock."""
    pid = parse_uuid(product_id)
    if pid is None:
        raise CartQuantityError(ErrorCode.CART_LINE_NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)
    try:
        cart = CartService.increment_line(ctx.db, ctx.user, pid)
    except SQLAlchemyError as e:
        logger.error(f"Incrementing cart line {product_id} failed: {e}")
        raise CartQuantityError(ErrorCode.INTERNAL_SERVER_ERROR, UPDATE_FAILED_MESSAGE, status_code=500)
    return {"cart": cart}


@router.post("/minus-product-quantity/{product_id}", dependencies=[Depends(verify_csrf_json)])
async def minus_product_quantity(product_id: str, ctx: JsonAuthContext):
    """Lower a cart line by one, never below one."""
    pid = parse_uuid(product_id)
    if pid is None:
        raise CartQuantityError(ErrorCode.CART_LINE_NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)
    try:
        cart = CartService.decrement_line(ctx.db, ctx.user, pid)
    except SQLAlchemyError as e:
        logger.error(f"Decrementing cart line {product_id} failed: {e}")
        raise CartQuantityError(ErrorCode.INTERNAL_SERVER_ERROR, UPDATE_FAILED_MESSAGE, status_code=500)
    return {"cart": cart}


@router.post("/delete-cart-item", dependencies=[Depends(verify_csrf)])
async def delete_cart_item(ctx: AuthContext, product_id: ProductIdField):
    pid = parse_uuid(product_id)
    if pid is not None:
        CartService.remove_line(ctx.db, ctx.user, pid)
    return redirect("/cart")
