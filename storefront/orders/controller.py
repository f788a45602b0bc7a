from fastapi import APIRouter

from .service import OrderService
from ..core.middleware.request_context import AuthContext
from ..schemas.orders import OrderResponse

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("")
async def get_orders(ctx: AuthContext):
    """Order history of the logged-in user, newest first."""
    orders = OrderService.list_orders(ctx.db, ctx.user.id)
    return ctx.render(
        "/orders",
        "Your Orders",
        orders=[OrderResponse.model_validate(order) for order in orders],
        order_msg=ctx.pop_flash("orderMsg"),
    )
