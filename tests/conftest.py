import os

# Must be set before the application modules read their configuration
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("EMAIL_ENABLED", "false")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from storefront.database.core import Base, get_db
from storefront.main import app
from storefront.core.infrastructure.rate_limiter import limiter
from storefront.cart.models import CartLine
from storefront.products.models import Product
from storefront.users.models import User
from storefront.utils import password_utils

# Use an in-memory SQLite database for testing
TEST_SQLALCHEMY_DATABASE_URL = "sqlite://"
TEST_PASSWORD = "ValidPassword123"


@pytest.fixture(scope="function")
def db_session():
    """
    Creates a new, isolated in-memory database session for each test.
    """
    engine = create_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def make_user(db_session):
    def _make_user(email="buyer@example.com", name="Buyer", password=TEST_PASSWORD):
        user = User(
            name=name,
            email=email,
            password_hash=password_utils.get_password_hash(password),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture(scope="function")
def buyer(make_user):
    return make_user()


@pytest.fixture(scope="function")
def seller(make_user):
    return make_user(email="seller@example.com", name="Seller")


@pytest.fixture(scope="function")
def make_product(db_session, seller):
    def _make_product(title="Pixel Phone", price=100.0, quantity=5, category="phone", rating=0.0, owner=None):
        product = Product(
            title=title,
            image_url="https://bucket.s3.us-east-1.amazonaws.com/image",
            price=price,
            description="A product description",
            quantity=quantity,
            category=category,
            rating=rating,
            user_id=(owner or seller).id,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make_product


@pytest.fixture(scope="function")
def put_in_cart(db_session):
    """Place a cart line directly, bypassing the HTTP flow."""
    def _put_in_cart(user, product, quantity=1):
        user.cart[product.id] = CartLine(product_id=product.id, quantity=quantity)
        db_session.commit()
    return _put_in_cart


@pytest.fixture(scope="function")
def client(db_session):
    """
    Creates a TestClient for the app bound to the test database session.
    """
    def override_get_db():
        # The test keeps using the same session after the request, so it is not closed here
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def fetch_csrf_token(client) -> str:
    return client.get("/login").json()["csrf_token"]


def login(client, user, password=TEST_PASSWORD):
    token = fetch_csrf_token(client)
    response = client.post(
        "/login",
        data={"email": user.email, "password": password, "_csrf": token},
        follow_redirects=False,
    )
    assert response.status_code == 303, "Failed to log in test user"
    return token


@pytest.fixture(scope="function")
def buyer_client(client, buyer):
    """A client logged in as ``buyer``; ``csrf`` holds the header to send on mutations."""
    token = login(client, buyer)
    client.csrf = {"X-CSRF-Token": token}
    return client


@pytest.fixture(scope="function")
def seller_client(client, seller):
    token = login(client, seller)
    client.csrf = {"X-CSRF-Token": token}
    return client
