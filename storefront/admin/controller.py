from typing import Annotated, Any, Dict, Optional
from fastapi import APIRouter, Depends, Form, Request
import logging

from ..core.exceptions import ReviewTargetNotFoundError
from ..core.infrastructure import delete_product_image, is_allowed_image, upload_product_image
from ..core.middleware.csrf import verify_csrf
from ..core.middleware.request_context import AuthContext, RequestContext, redirect
from ..products.service import ProductService
from ..reviews.service import ReviewService
from ..schemas.products import ProductForm, product_list
from ..schemas.reviews import ReviewForm
from ..utils.forms import form_values, validate_form
from ..utils.identifiers import parse_uuid
from ..utils.pagination import parse_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

IMAGE_REQUIRED_MESSAGE = "Please upload an image in the format of png, jpg or jpeg"
ALREADY_REVIEWED_MESSAGE = "You have already reviewed this product."
BLANK_PRODUCT_FORM = {"title": "", "price": "", "description": "", "quantity": "", "category": ""}


def render_product_form(ctx: RequestContext, is_editing: bool, values: Dict[str, Any],
                        errors: Optional[list] = None, image_error_msg: Optional[str] = None,
                        product_id: Optional[str] = None, invalid: bool = False):
    page_title = "Edit Product" if is_editing else "Add Product"
    errors = errors or []
    page = dict(
        is_editing=is_editing,
        validation_errors=errors,
        form_values=values,
        image_error_msg=image_error_msg,
        has_category_validation_error=any(error["field"] == "category" for error in errors),
        product_id=product_id,
    )
    if invalid:
        return ctx.render_invalid("/admin/products", page_title, **page)
    return ctx.render("/admin/products", page_title, **page)


@router.get("/products")
async def get_products(ctx: AuthContext, page: Optional[str] = None):
    """The seller's own products."""
    pagination = ProductService.list_owner_products(ctx.db, ctx.user.id, parse_page(page))
    return ctx.render(
        "/admin/products",
        "Your Products",
        products=product_list(pagination.items),
        **pagination.to_context(),
    )


@router.get("/add-product")
async def get_add_product(ctx: AuthContext):
    return render_product_form(ctx, is_editing=False, values=dict(BLANK_PRODUCT_FORM))


@router.post("/add-product", dependencies=[Depends(verify_csrf)])
async def post_add_product(request: Request, ctx: AuthContext):
    form = await request.form()
    product_form, errors = validate_form(ProductForm, form)
    if errors:
        return render_product_form(ctx, False, form_values(form), errors=errors, invalid=True)

    image = form.get("image")
    if not is_allowed_image(image):
        return render_product_form(ctx, False, form_values(form), image_error_msg=IMAGE_REQUIRED_MESSAGE, invalid=True)

    image_url = upload_product_image(ctx.user.id, image)
    try:
        ProductService.create_product(ctx.db, ctx.user.id, product_form, image_url)
    except Exception:
        delete_product_image(image_url)
        raise
    return redirect("/admin/products")


@router.get("/edit-product/{product_id}")
async def get_edit_product(product_id: str, ctx: AuthContext):
    pid = parse_uuid(product_id)
    product = ProductService.get_owned_product(ctx.db, ctx.user.id, pid) if pid else None
    if product is None:
        return redirect("/admin/products")

    values = {
        "title": product.title,
        "price": product.price,
        "description": product.description,
        "quantity": product.quantity,
        "category": product.category,
    }
    return render_product_form(ctx, is_editing=True, values=values, product_id=str(product.id))


@router.post("/edit-product", dependencies=[Depends(verify_csrf)])
async def post_edit_product(request: Request, ctx: AuthContext):
    """Update an owned product; the image is only replaced when a new one is uploaded."""
    form = await request.form()
    product_id = form.get("productId")
    product_form, errors = validate_form(ProductForm, form)
    if errors:
        return render_product_form(ctx, True, form_values(form), errors=errors, product_id=product_id, invalid=True)

    pid = parse_uuid(product_id)
    if pid is None or ProductService.get_owned_product(ctx.db, ctx.user.id, pid) is None:
        return redirect("/admin/products")

    image = form.get("image")
    image_url = upload_product_image(ctx.user.id, image) if is_allowed_image(image) else None
    try:
        ProductService.update_product(ctx.db, ctx.user.id, pid, product_form, image_url)
    except Exception:
        if image_url:
            delete_product_image(image_url)
        raise
    return redirect("/admin/products")


@router.post("/delete-product", dependencies=[Depends(verify_csrf)])
async def post_delete_product(ctx: AuthContext, product_id: Annotated[str, Form(alias="productId")]):
    pid = parse_uuid(product_id)
    if pid is not None:
        ProductService.delete_product(ctx.db, ctx.user.id, pid)
    return redirect("/admin/products")


@router.get("/review/{product_id}")
async def get_review_product(product_id: str, ctx: AuthContext, order: Optional[str] = None):
    """Review form for a product of one of the user's orders."""
    pid, order_id = parse_uuid(product_id), parse_uuid(order)
    line = ReviewService.find_order_line(ctx.db, ctx.user.id, order_id, pid) if pid and order_id else None
    if line is None:
        return redirect("/orders")
    if line.reviewed:
        ctx.flash("orderMsg", ALREADY_REVIEWED_MESSAGE)
        return redirect("/orders")

    return ctx.render(
        "/admin/products",
        "Review",
        product_id=product_id,
        order_id=order,
        form_values={"review": "", "rating": ""},
        validation_errors=[],
        has_rating_error=False,
    )


@router.post("/review", dependencies=[Depends(verify_csrf)])
async def post_review(request: Request, ctx: AuthContext):
    form = await request.form()
    review_form, errors = validate_form(ReviewForm, form)
    if errors:
        return ctx.render_invalid(
            "/admin/products",
            "Review",
            product_id=form.get("productId"),
            order_id=form.get("orderId"),
            form_values=form_values(form),
            validation_errors=errors,
            has_rating_error=any(error["field"] == "rating" for error in errors),
        )

    pid, order_id = parse_uuid(review_form.product_id), parse_uuid(review_form.order_id)
    # Only the buyer of the order may review its products
    line = ReviewService.find_order_line(ctx.db, ctx.user.id, order_id, pid) if pid and order_id else None
    if line is None:
        raise ReviewTargetNotFoundError(review_form.order_id, review_form.product_id)
    if line.reviewed:
        ctx.flash("orderMsg", ALREADY_REVIEWED_MESSAGE)
        return redirect("/orders")

    ReviewService.submit_review(ctx.db, ctx.user, order_id, pid, review_form.rating, review_form.review)
    return redirect("/orders")
