# storefront/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # --- API Info ---
    API_TITLE: str = "Storefront API"
    API_DESCRIPTION: str = "Product catalog, cart, checkout, orders, reviews and seller administration."
    API_VERSION: str = "1.0.0"

    # --- Server Configuration ---
    PORT: int = int(os.getenv("PORT", "8000"))
    HOST: str = os.getenv("HOST", "0.0.0.0")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    # Used to build absolute links (password reset e-mails, Stripe redirects)
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # --- Database ---
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")

    # --- Sessions ---
    SESSION_SECRET_KEY: str = os.getenv("SESSION_SECRET_KEY", "fallback-secret-key")
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "storefront_session")
    SESSION_MAX_AGE: int = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 24 * 14)))

    # --- Catalog ---
    PRODUCTS_PER_PAGE: int = int(os.getenv("PRODUCTS_PER_PAGE", "8"))
    INDEX_PRODUCTS_LIMIT: int = int(os.getenv("INDEX_PRODUCTS_LIMIT", "10"))

    # --- Reviews ---
    MIN_RATING: int = 1
    MAX_RATING: int = 5

    # --- Password reset ---
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))

    # --- Stripe ---
    STRIPE_SECRET_KEY: str = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET: str = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_CURRENCY: str = os.getenv("STRIPE_CURRENCY", "myr")

    # --- Product images (S3) ---
    S3_REGION: str = os.getenv("S3_REGION", "us-east-1")
    S3_BUCKET: str = os.getenv("S3_BUCKET", "storefront-product-images")
    S3_ACCESS_KEY: str = os.getenv("S3_ACCESS_KEY", "")
    S3_SECRET_ACCESS_KEY: str = os.getenv("S3_SECRET_ACCESS_KEY", "")

    # --- Rate limiting ---
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "1") == "1"
    PASSWORD_RESET_RATE_LIMIT: str = os.getenv("PASSWORD_RESET_RATE_LIMIT", "10/day")


settings = Settings()
