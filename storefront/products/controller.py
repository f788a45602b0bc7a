from typing import Annotated, Optional
from urllib.parse import quote
from fastapi import APIRouter, Depends, Form

from .service import ProductService
from ..core.middleware.csrf import verify_csrf
from ..core.middleware.request_context import Context, redirect
from ..schemas.products import ProductResponse, ReviewResponse, product_list
from ..utils.identifiers import parse_uuid
from ..utils.pagination import parse_page

router = APIRouter(tags=["shop"])


@router.get("/")
async def get_index(ctx: Context):
    """Best rated products."""
    products = ProductService.list_top_rated(ctx.db)
    return ctx.render("/", "Shop", products=product_list(products))


@router.get("/products")
async def get_products(ctx: Context, page: Optional[str] = None):
    pagination = ProductService.list_products(ctx.db, parse_page(page))
    return ctx.render(
        "/products",
        "Products",
        products=product_list(pagination.items),
        **pagination.to_context(),
    )


@router.get("/products/{product_id}")
async def get_product(product_id: str, ctx: Context):
    """Product page with its reviews. Unknown products go back to the listing."""
    pid = parse_uuid(product_id)
    found = ProductService.get_product_with_reviews(ctx.db, pid) if pid else None
    if found is None:
        return redirect("/products")

    product, reviews = found
    return ctx.render(
        "/products",
        "Product",
        product=ProductResponse.model_validate(product),
        reviews=[ReviewResponse.model_validate(review) for review in reviews],
    )


@router.post("/search", dependencies=[Depends(verify_csrf)])
async def post_search(search_term: Annotated[str, Form(alias="searchTerm")] = ""):
    term = search_term.strip()
    if not term:
        return redirect("/products")
    return redirect(f"/search/{quote(term, safe='')}")


@router.get("/search/{search_term:path}")
async def get_search(search_term: str, ctx: Context, page: Optional[str] = None):
    pagination = ProductService.search_products(ctx.db, search_term, parse_page(page))
    return ctx.render(
        "/products",
        "Search Results",
        products=product_list(pagination.items),
        search_term=search_term,
        total_search_results=pagination.total,
        start_result=pagination.start_result,
        end_result=pagination.end_result,
        **pagination.to_context(),
    )


@router.get("/about-us")
async def get_about_us(ctx: Context):
    return ctx.render("/about-us", "About Us")


@router.get("/terms")
async def get_terms(ctx: Context):
    return ctx.render("/terms", "Terms & Services")


@router.get("/contact-us")
async def get_contact_us(ctx: Context):
    return ctx.render("/contact-us", "Contact Us")
