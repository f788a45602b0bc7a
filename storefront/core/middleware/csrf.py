# storefront/core/middleware/csrf.py
"""
Session-bound CSRF protection.

A random token is stored in the session the first time a page context is
built and must be echoed back on every mutating request, either in the
``X-CSRF-Token`` header or in the ``_csrf`` form field.
"""

import secrets
from typing import Optional
from fastapi import Request
from ..exceptions import CartQuantityError, CsrfError, ErrorCode

CSRF_SESSION_KEY = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"
CSRF_FORM_FIELD = "_csrf"
SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def generate_csrf_token(session: dict) -> str:
    """Return the session's CSRF token, creating it on first use."""
    if CSRF_SESSION_KEY not in session:
        session[CSRF_SESSION_KEY] = secrets.token_hex(16)
    return session[CSRF_SESSION_KEY]


def validate_csrf_token(session: dict, token: Optional[str]) -> bool:
    expected = session.get(CSRF_SESSION_KEY)
    if not token or not expected:
        return False
    return secrets.compare_digest(str(token), expected)


async def submitted_token(request: Request) -> Optional[str]:
    token = request.headers.get(CSRF_HEADER)
    if not token and request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPES):
        # Starlette caches the parsed form, so the endpoint can still read it
        form = await request.form()
        token = form.get(CSRF_FORM_FIELD)
    return token


async def verify_csrf(request: Request) -> None:
    """FastAPI dependency guarding mutating routes."""
    if request.method in SAFE_METHODS:
        return
    if not validate_csrf_token(request.session, await submitted_token(request)):
        raise CsrfError()


async def verify_csrf_json(request: Request) -> None:
    """Same check for the JSON quantity endpoints, which answer with a bare ``{message}``."""
    if request.method in SAFE_METHODS:
        return
    if not validate_csrf_token(request.session, await submitted_token(request)):
        raise CartQuantityError(ErrorCode.CSRF_TOKEN_INVALID, "Invalid or missing CSRF token.", status_code=403)
