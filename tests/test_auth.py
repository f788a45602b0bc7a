from datetime import datetime, timedelta, timezone

import pytest

from storefront.auth import service
from storefront.users.models import User

from conftest import TEST_PASSWORD, fetch_csrf_token


@pytest.fixture
def reset_email(mocker):
    return mocker.patch("storefront.auth.controller.send_password_reset_email")


def signup_data(token, **overrides):
    data = {
        "name": "New User",
        "email": "new.user@example.com",
        "password": "longenough1",
        "passwordConfirm": "longenough1",
        "_csrf": token,
    }
    data.update(overrides)
    return data


def test_signup_creates_account_and_flashes_success(client, db_session):
    token = fetch_csrf_token(client)

    response = client.post("/signup", data=signup_data(token), follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    user = db_session.query(User).filter(User.email == "new.user@example.com").one()
    assert user.password_hash != "longenough1"
    login_page = client.get("/login").json()
    assert login_page["success_msg"] == "Your account was created successfully. Please login to your account."


def test_signup_with_registered_email(client, buyer):
    token = fetch_csrf_token(client)

    response = client.post("/signup", data=signup_data(token, email=buyer.email))

    assert response.status_code == 422
    body = response.json()
    assert body["validation_errors"] == [{
        "field": "email",
        "message": "Email already registered. Please sign up with a different email.",
        "type": "email_taken",
    }]
    assert body["form_values"]["name"] == "New User"


def test_signup_validation_errors(client, db_session):
    token = fetch_csrf_token(client)

    response = client.post(
        "/signup", data=signup_data(token, email="not-an-email", password="short", passwordConfirm="other")
    )

    assert response.status_code == 422
    errors = {error["field"]: error["message"] for error in response.json()["validation_errors"]}
    assert errors["email"] == "Please provide a valid email"
    assert errors["password"] == "Password should be at least 8 characters long"
    assert db_session.query(User).count() == 0


def test_signup_password_mismatch(client):
    token = fetch_csrf_token(client)

    response = client.post("/signup", data=signup_data(token, passwordConfirm="different1"))

    assert response.status_code == 422
    errors = {error["field"]: error["message"] for error in response.json()["validation_errors"]}
    assert errors == {"passwordConfirm": "Passwords provided do not match"}


def test_login_with_wrong_password(client, buyer):
    token = fetch_csrf_token(client)

    response = client.post("/login", data={"email": buyer.email, "password": "wrongpassword", "_csrf": token})

    assert response.status_code == 422
    body = response.json()
    assert body["login_error_msg"] == "Invalid email or password. Please try again."
    assert body["form_values"]["email"] == buyer.email
    assert body["is_authenticated"] is False


def test_login_and_logout(client, buyer):
    token = fetch_csrf_token(client)

    response = client.post(
        "/login", data={"email": buyer.email.upper(), "password": TEST_PASSWORD, "_csrf": token}, follow_redirects=False
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert client.get("/").json()["is_authenticated"] is True

    response = client.post("/logout", headers={"X-CSRF-Token": token}, follow_redirects=False)
    assert response.status_code == 303
    assert client.get("/").json()["is_authenticated"] is False


def test_forgot_password_for_unknown_email(client, reset_email):
    token = fetch_csrf_token(client)

    response = client.post("/forgot-password", data={"email": "nobody@example.com", "_csrf": token})

    assert response.status_code == 422
    assert response.json()["email_error_msg"] == "Email does not exist."
    reset_email.assert_not_called()


def test_password_reset_flow(client, db_session, buyer, reset_email):
    token = fetch_csrf_token(client)

    response = client.post("/forgot-password", data={"email": buyer.email, "_csrf": token}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    db_session.refresh(buyer)
    reset_token = buyer.reset_token
    assert len(reset_token) == 64
    reset_email.assert_called_once()
    assert reset_email.call_args.kwargs["reset_link"].endswith(f"/reset/{reset_token}")

    reset_page = client.get(f"/reset/{reset_token}").json()
    assert reset_page["user_id"] == str(buyer.id)

    response = client.post(
        "/new-password",
        data={
            "password": "brandnewpass",
            "passwordConfirm": "brandnewpass",
            "userId": str(buyer.id),
            "resetToken": reset_token,
            "_csrf": token,
        },
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert client.get("/login").json()["success_msg"] == "Password updated successfully!"
    db_session.expire_all()
    assert buyer.reset_token is None
    assert service.authenticate_user(db_session, buyer.email, "brandnewpass") is not None
    assert service.authenticate_user(db_session, buyer.email, TEST_PASSWORD) is None


def test_expired_reset_token_is_rejected(client, db_session, buyer):
    buyer.reset_token = "a" * 64
    buyer.reset_token_expiration = datetime.now(timezone.utc) - timedelta(minutes=1)
    db_session.commit()

    response = client.get(f"/reset/{'a' * 64}", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/forgot-password"
    page = client.get("/forgot-password").json()
    assert page["flash_error_msg"] == (
        "Invalid reset token or reset token already expired. Please request another reset token"
    )


def test_new_password_with_wrong_user_is_rejected(client, db_session, buyer, make_user):
    other = make_user(email="other@example.com", name="Other")
    buyer.reset_token = "b" * 64
    buyer.reset_token_expiration = datetime.now(timezone.utc) + timedelta(minutes=30)
    db_session.commit()
    token = fetch_csrf_token(client)

    response = client.post(
        "/new-password",
        data={
            "password": "brandnewpass",
            "passwordConfirm": "brandnewpass",
            "userId": str(other.id),
            "resetToken": "b" * 64,
            "_csrf": token,
        },
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/forgot-password"
    db_session.expire_all()
    assert service.authenticate_user(db_session, other.email, TEST_PASSWORD) is not None
