import uuid

import pytest

from storefront.core.exceptions import ReviewTargetNotFoundError
from storefront.orders.service import OrderService
from storefront.reviews.models import Review
from storefront.reviews.service import ReviewService

from conftest import login


@pytest.fixture
def ordered_product(db_session, buyer, make_product, put_in_cart):
    product = make_product(title="MacBook", category="laptop")
    put_in_cart(buyer, product)
    order, _ = OrderService.place_order(db_session, buyer)
    return order, product


def test_rating_is_mean_of_all_reviews(db_session, buyer, make_user, make_product, put_in_cart):
    product = make_product(quantity=10)
    second_buyer = make_user(email="second@example.com", name="Second")

    put_in_cart(buyer, product)
    first_order, _ = OrderService.place_order(db_session, buyer)
    put_in_cart(second_buyer, product)
    second_order, _ = OrderService.place_order(db_session, second_buyer)

    ReviewService.submit_review(db_session, buyer, first_order.id, product.id, 4, "Solid")
    ReviewService.submit_review(db_session, second_buyer, second_order.id, product.id, 5, "Great")

    db_session.expire_all()
    assert product.rating == 4.5
    assert first_order.lines[0].reviewed is True
    assert second_order.lines[0].reviewed is True


def test_missing_order_leaves_no_review(db_session, buyer, ordered_product):
    _, product = ordered_product

    with pytest.raises(ReviewTargetNotFoundError):
        ReviewService.submit_review(db_session, buyer, uuid.uuid4(), product.id, 5, "Ghost review")

    db_session.expire_all()
    assert db_session.query(Review).count() == 0
    assert product.rating == 0


def test_review_form_page(buyer_client, ordered_product):
    order, product = ordered_product

    body = buyer_client.get(f"/admin/review/{product.id}", params={"order": str(order.id)}).json()

    assert body["page_title"] == "Review"
    assert body["order_id"] == str(order.id)
    assert body["form_values"] == {"review": "", "rating": ""}


def test_post_review_updates_rating_and_redirects(buyer_client, db_session, ordered_product):
    order, product = ordered_product

    response = buyer_client.post(
        "/admin/review",
        data={"productId": str(product.id), "orderId": str(order.id), "review": "  Fast machine  ", "rating": "4"},
        headers=buyer_client.csrf,
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/orders"
    db_session.expire_all()
    review = db_session.query(Review).one()
    assert review.review == "Fast machine"
    assert product.rating == 4.0

    detail = buyer_client.get(f"/products/{product.id}").json()
    assert detail["reviews"][0]["author"]["name"] == "Buyer"


def test_invalid_review_is_rerendered_with_values(buyer_client, db_session, ordered_product):
    order, product = ordered_product

    response = buyer_client.post(
        "/admin/review",
        data={"productId": str(product.id), "orderId": str(order.id), "review": "ok", "rating": "9"},
        headers=buyer_client.csrf,
    )

    assert response.status_code == 422
    body = response.json()
    assert {error["field"] for error in body["validation_errors"]} == {"review", "rating"}
    assert body["form_values"]["review"] == "ok"
    assert body["has_rating_error"] is True
    assert db_session.query(Review).count() == 0


def test_reviewing_another_users_order_fails(client, db_session, make_user, ordered_product):
    order, product = ordered_product
    intruder = make_user(email="intruder@example.com", name="Intruder")
    token = login(client, intruder)

    response = client.post(
        "/admin/review",
        data={"productId": str(product.id), "orderId": str(order.id), "review": "Not mine", "rating": "1"},
        headers={"X-CSRF-Token": token},
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "REVIEW_TARGET_NOT_FOUND"
    assert db_session.query(Review).count() == 0


def test_line_is_reviewed_only_once(buyer_client, db_session, ordered_product):
    order, product = ordered_product
    data = {"productId": str(product.id), "orderId": str(order.id), "review": "Nice one", "rating": "5"}

    buyer_client.post("/admin/review", data=data, headers=buyer_client.csrf, follow_redirects=False)
    response = buyer_client.post("/admin/review", data=data, headers=buyer_client.csrf, follow_redirects=False)

    assert response.status_code == 303
    assert db_session.query(Review).count() == 1
    assert buyer_client.get("/orders").json()["order_msg"] == "You have already reviewed this product."
