# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.error_handlers import setup_error_handlers, add_request_id_middleware
from .core.infrastructure.rate_limiter import limiter
# Import models to ensure they are registered with SQLAlchemy
from .database.models import Base
from .database.core import engine
from .logging import logger

from .products.controller import router as shop_router
from .cart.controller import router as cart_router
from .checkout.controller import router as checkout_router
from .orders.controller import router as orders_router
from .auth.controller import router as auth_router
from .admin.controller import router as admin_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception:
        logger.exception("Database initialization failed")
        raise
    yield
    logger.info("Storefront shutting down")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

# Set up error handlers
setup_error_handlers(app)

app.state.limiter = limiter

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET_KEY,
    same_site='lax',
    https_only=settings.ENVIRONMENT == 'production',  # HTTPS in production only
    max_age=settings.SESSION_MAX_AGE,
    session_cookie=settings.SESSION_COOKIE_NAME
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.BASE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request ID middleware for better error tracking
app.middleware("http")(add_request_id_middleware)

app.include_router(shop_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(auth_router)
app.include_router(admin_router)


# Health check endpoint for production monitoring
@app.get("/health")
async def health_check():
    return {"status": "ok"}
