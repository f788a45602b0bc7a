# storefront/auth/controller.py
from fastapi import APIRouter, BackgroundTasks, Depends, Request

from . import service
from ..core.config import settings
from ..core.infrastructure import limiter, send_password_reset_email
from ..core.middleware.csrf import verify_csrf
from ..core.middleware.request_context import Context, redirect
from ..schemas.auth import ForgotPasswordForm, LoginForm, NewPasswordForm, SignupForm
from ..utils.forms import form_values, validate_form
from ..utils.identifiers import parse_uuid

router = APIRouter(tags=['auth'])

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please try again."
EMAIL_TAKEN_MESSAGE = "Email already registered. Please sign up with a different email."
UNKNOWN_EMAIL_MESSAGE = "Email does not exist."
INVALID_RESET_TOKEN_MESSAGE = "Invalid reset token or reset token already expired. Please request another reset token"
SIGNUP_SUCCESS_MESSAGE = "Your account was created successfully. Please login to your account."
RESET_SENT_MESSAGE = "An email with the reset token had been sent to your email."
PASSWORD_UPDATED_MESSAGE = "Password updated successfully!"


@router.get("/login")
async def get_login(ctx: Context):
    return ctx.render(
        "/login",
        "Login",
        validation_errors=[],
        form_values={"email": "", "password": ""},
        login_error_msg=None,
        success_msg=ctx.pop_flash("successMsg"),
    )


@router.post("/login", dependencies=[Depends(verify_csrf)])
async def post_login(request: Request, ctx: Context):
    form = await request.form()
    credentials, errors = validate_form(LoginForm, form)
    page = dict(validation_errors=errors, form_values=form_values(form), login_error_msg=None, success_msg=None)
    if errors:
        return ctx.render_invalid("/login", "Login", **page)

    user = service.authenticate_user(ctx.db, credentials.email, credentials.password)
    if user is None:
        page["login_error_msg"] = INVALID_CREDENTIALS_MESSAGE
        return ctx.render_invalid("/login", "Login", **page)

    ctx.login(user)
    return redirect("/")


@router.get("/signup")
async def get_signup(ctx: Context):
    return ctx.render(
        "/signup",
        "Sign Up",
        validation_errors=[],
        form_values={"name": "", "email": "", "password": "", "passwordConfirm": ""},
    )


@router.post("/signup", dependencies=[Depends(verify_csrf)])
async def post_signup(request: Request, ctx: Context):
    """Register a new user account."""
    form = await request.form()
    signup, errors = validate_form(SignupForm, form)
    if errors:
        return ctx.render_invalid("/signup", "Sign Up", validation_errors=errors, form_values=form_values(form))

    if service.register_user(ctx.db, signup) is None:
        errors = [{"field": "email", "message": EMAIL_TAKEN_MESSAGE, "type": "email_taken"}]
        return ctx.render_invalid("/signup", "Sign Up", validation_errors=errors, form_values=form_values(form))

    ctx.flash("successMsg", SIGNUP_SUCCESS_MESSAGE)
    return redirect("/login")


@router.post("/logout", dependencies=[Depends(verify_csrf)])
async def post_logout(ctx: Context):
    ctx.logout()
    return redirect("/")


@router.get("/forgot-password")
async def get_forgot_password(ctx: Context):
    return ctx.render(
        "/login",
        "Forgot Password",
        validation_errors=[],
        form_values={"email": ""},
        email_error_msg=None,
        flash_error_msg=ctx.pop_flash("error"),
    )


@router.post("/forgot-password", dependencies=[Depends(verify_csrf)])
@limiter.limit(settings.PASSWORD_RESET_RATE_LIMIT)
async def post_forgot_password(request: Request, ctx: Context, background_tasks: BackgroundTasks):
    """Store a reset token and e-mail the reset link."""
    form = await request.form()
    data, errors = validate_form(ForgotPasswordForm, form)
    page = dict(validation_errors=errors, form_values=form_values(form), email_error_msg=None, flash_error_msg=None)
    if errors:
        return ctx.render_invalid("/login", "Forgot Password", **page)

    issued = service.create_password_reset_token(ctx.db, data.email)
    if issued is None:
        page["email_error_msg"] = UNKNOWN_EMAIL_MESSAGE
        return ctx.render_invalid("/login", "Forgot Password", **page)

    user, token = issued
    background_tasks.add_task(
        send_password_reset_email,
        recipient_email=user.email,
        reset_link=f"{settings.BASE_URL}/reset/{token}",
        name=user.name,
    )
    ctx.flash("successMsg", RESET_SENT_MESSAGE)
    return redirect("/login")


@router.get("/reset/{token}")
async def get_reset(token: str, ctx: Context):
    user = service.get_user_by_reset_token(ctx.db, token)
    if user is None:
        ctx.flash("error", INVALID_RESET_TOKEN_MESSAGE)
        return redirect("/forgot-password")

    return ctx.render(
        "/login",
        "Reset Password",
        validation_errors=[],
        form_values={"password": "", "passwordConfirm": ""},
        reset_token=token,
        user_id=str(user.id),
    )


@router.post("/new-password", dependencies=[Depends(verify_csrf)])
async def post_new_password(request: Request, ctx: Context):
    form = await request.form()
    data, errors = validate_form(NewPasswordForm, form)
    if errors:
        return ctx.render_invalid(
            "/login",
            "Reset Password",
            validation_errors=errors,
            form_values=form_values(form),
            reset_token=form.get("resetToken"),
            user_id=form.get("userId"),
        )

    user_id = parse_uuid(data.user_id)
    if user_id is None or not service.reset_password(ctx.db, user_id, data.reset_token, data.password):
        ctx.flash("error", INVALID_RESET_TOKEN_MESSAGE)
        return redirect("/forgot-password")

    ctx.flash("successMsg", PASSWORD_UPDATED_MESSAGE)
    return redirect("/login")
