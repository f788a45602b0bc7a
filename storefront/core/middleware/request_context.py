# storefront/core/middleware/request_context.py

import logging
import uuid
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from ...database.core import DbSession
from ...users.models import User
from ...cart.service import CartService
from ..exceptions import CartQuantityError, ErrorCode, LoginRequiredError
from .csrf import generate_csrf_token

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
FLASH_SESSION_KEY = "_flash"


@dataclass
class RequestContext:
    """
    Everything a handler needs to know about the current request: the
    database session, the logged-in user (if any) and the session-backed
    flash messages. Handlers receive it explicitly instead of reading
    per-request globals.
    """
    request: Request
    db: Session
    user: Optional[User] = None

    @property
    def session(self) -> dict:
        return self.request.session

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def num_cart_items(self) -> int:
        if self.user is None:
            return 0
        return CartService.count_items(self.user)

    def login(self, user: User) -> None:
        self.session[SESSION_USER_KEY] = str(user.id)
        self.user = user

    def logout(self) -> None:
        self.session.clear()
        self.user = None

    def flash(self, category: str, message: str) -> None:
        messages = self.session.setdefault(FLASH_SESSION_KEY, {})
        messages.setdefault(category, []).append(message)

    def pop_flash(self, category: str) -> Optional[str]:
        """Consume the messages of one category, returning the first one."""
        messages = self.session.get(FLASH_SESSION_KEY, {}).pop(category, [])
        return messages[0] if messages else None

    def render(self, path: str, page_title: str, **data: Any) -> Dict[str, Any]:
        """Build the page context a template would have received."""
        return {
            "path": path,
            "page_title": page_title,
            "is_authenticated": self.is_authenticated,
            "csrf_token": generate_csrf_token(self.session),
            "num_cart_items": self.num_cart_items,
            **data,
        }

    def render_invalid(self, path: str, page_title: str, **data: Any) -> JSONResponse:
        """Page context of a form re-rendered after failed validation (422)."""
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder(self.render(path, page_title, **data)),
        )


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def get_request_context(request: Request, db: DbSession) -> RequestContext:
    """Attach the session's user to the request, dropping stale sessions."""
    ctx = RequestContext(request=request, db=db)
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return ctx

    try:
        user = db.get(User, uuid.UUID(user_id))
    except ValueError:
        user = None

    if user is None:
        logger.info(f"Dropping session for unknown user {user_id}")
        request.session.pop(SESSION_USER_KEY, None)
        return ctx

    ctx.user = user
    return ctx


Context = Annotated[RequestContext, Depends(get_request_context)]


def require_user(ctx: Context) -> RequestContext:
    """Authentication gate for page routes."""
    if ctx.user is None:
        raise LoginRequiredError(ctx.request.url.path)
    return ctx


def require_user_json(ctx: Context) -> RequestContext:
    """Authentication gate for the JSON quantity endpoints."""
    if ctx.user is None:
        raise CartQuantityError(
            ErrorCode.AUTHENTICATION_REQUIRED,
            "Please log in to update your cart.",
            status_code=401
        )
    return ctx


AuthContext = Annotated[RequestContext, Depends(require_user)]
JsonAuthContext = Annotated[RequestContext, Depends(require_user_json)]
