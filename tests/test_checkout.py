from types import SimpleNamespace

import pytest

from storefront.cart.models import CartLine
from storefront.orders.models import Order

SESSION_ID = "cs_test_123"


@pytest.fixture
def stripe_create(mocker):
    return mocker.patch(
        "stripe.checkout.Session.create",
        return_value=SimpleNamespace(id=SESSION_ID, url=f"https://checkout.stripe.com/c/pay/{SESSION_ID}"),
    )


@pytest.fixture
def confirmation_email(mocker):
    return mocker.patch("storefront.checkout.controller.send_order_confirmation_email")


def paid_session(user, payment_status="paid"):
    return {"id": SESSION_ID, "payment_status": payment_status, "client_reference_id": str(user.id)}


def test_checkout_creates_payment_session(buyer_client, buyer, make_product, put_in_cart, stripe_create):
    put_in_cart(buyer, make_product(title="Dell Desktop", price=1999.99, quantity=3, category="desktop"), quantity=2)

    response = buyer_client.get("/checkout")

    assert response.status_code == 200
    body = response.json()
    assert body["session_id"] == SESSION_ID
    assert body["total_sum"] == pytest.approx(3999.98)

    kwargs = stripe_create.call_args.kwargs
    assert kwargs["mode"] == "payment"
    assert kwargs["client_reference_id"] == str(buyer.id)
    assert kwargs["line_items"] == [{
        "price_data": {
            "currency": "myr",
            "product_data": {"name": "Dell Desktop"},
            "unit_amount": 199999,
        },
        "quantity": 2,
    }]
    assert "{CHECKOUT_SESSION_ID}" in kwargs["success_url"]


def test_sold_out_line_aborts_checkout(buyer_client, db_session, buyer, make_product, put_in_cart, stripe_create):
    put_in_cart(buyer, make_product(title="In Stock", quantity=10), quantity=1)
    scarce = make_product(title="Steam Deck", quantity=3, category="game console")
    put_in_cart(buyer, scarce, quantity=3)
    scarce.quantity = 2
    db_session.commit()

    response = buyer_client.get("/checkout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/cart"
    stripe_create.assert_not_called()

    db_session.expire_all()
    quantities = sorted(line.quantity for line in db_session.query(CartLine).all())
    assert quantities == [1, 3]

    cart_page = buyer_client.get("/cart").json()
    assert cart_page["cart_error_msg"] == "Steam Deck just sold out. Please delete it from the cart to continue."
    # Flash messages are consumed once
    assert buyer_client.get("/cart").json()["cart_error_msg"] is None


def test_checkout_with_empty_cart_redirects_to_cart(buyer_client, stripe_create):
    response = buyer_client.get("/checkout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/cart"
    stripe_create.assert_not_called()


def test_success_callback_places_order_once(buyer_client, db_session, buyer, make_product, put_in_cart,
                                            mocker, confirmation_email):
    product = make_product(title="Galaxy", quantity=5)
    put_in_cart(buyer, product, quantity=2)
    mocker.patch("stripe.checkout.Session.retrieve", return_value=paid_session(buyer))

    for _ in range(2):
        response = buyer_client.get("/checkout/success", params={"session_id": SESSION_ID}, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/orders"

    db_session.expire_all()
    orders = db_session.query(Order).all()
    assert len(orders) == 1
    assert orders[0].payment_session_id == SESSION_ID
    assert product.quantity == 3
    confirmation_email.assert_called_once_with(buyer.email, str(orders[0].id), [("Galaxy", 2)])


def test_unpaid_session_places_no_order(buyer_client, db_session, buyer, make_product, put_in_cart,
                                        mocker, confirmation_email):
    put_in_cart(buyer, make_product(), quantity=1)
    mocker.patch("stripe.checkout.Session.retrieve", return_value=paid_session(buyer, payment_status="unpaid"))

    response = buyer_client.get("/checkout/success", params={"session_id": SESSION_ID}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/cart"
    assert db_session.query(Order).count() == 0
    confirmation_email.assert_not_called()


def test_session_of_another_user_places_no_order(buyer_client, db_session, buyer, make_user, make_product,
                                                 put_in_cart, mocker):
    other = make_user(email="other@example.com", name="Other")
    put_in_cart(buyer, make_product(), quantity=1)
    mocker.patch("stripe.checkout.Session.retrieve", return_value=paid_session(other))

    buyer_client.get("/checkout/success", params={"session_id": SESSION_ID}, follow_redirects=False)

    assert db_session.query(Order).count() == 0


def test_webhook_places_order_and_success_redirect_does_not_duplicate(
    buyer_client, db_session, buyer, make_product, put_in_cart, mocker, confirmation_email
):
    put_in_cart(buyer, make_product(quantity=5), quantity=1)
    event = {"type": "checkout.session.completed", "data": {"object": paid_session(buyer)}}
    mocker.patch("stripe.Webhook.construct_event", return_value=event)
    mocker.patch("stripe.checkout.Session.retrieve", return_value=paid_session(buyer))

    response = buyer_client.post("/checkout/webhook", content=b"{}", headers={"stripe-signature": "t=1,v1=abc"})
    assert response.status_code == 200
    assert response.json() == {"received": True}

    buyer_client.get("/checkout/success", params={"session_id": SESSION_ID}, follow_redirects=False)

    assert db_session.query(Order).count() == 1
    confirmation_email.assert_called_once()


def test_webhook_ignores_other_events(client, db_session, mocker):
    mocker.patch("stripe.Webhook.construct_event", return_value={"type": "payment_intent.created", "data": {}})

    response = client.post("/checkout/webhook", content=b"{}", headers={"stripe-signature": "sig"})

    assert response.status_code == 200
    assert db_session.query(Order).count() == 0


def test_webhook_with_bad_signature_is_rejected(client, mocker):
    mocker.patch("stripe.Webhook.construct_event", side_effect=Exception("No signatures found"))

    response = client.post("/checkout/webhook", content=b"{}", headers={"stripe-signature": "bad"})

    assert response.status_code == 401


def test_checkout_cancel_shows_cart(buyer_client, buyer, make_product, put_in_cart):
    put_in_cart(buyer, make_product(price=20.0), quantity=2)

    body = buyer_client.get("/checkout/cancel").json()

    assert body["page_title"] == "Your Cart"
    assert body["total_sum"] == 40.0
