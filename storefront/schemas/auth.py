from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from typing import ClassVar, Dict

from ..utils.password_utils import MIN_PASSWORD_LENGTH


class LoginForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    field_messages: ClassVar[Dict[str, str]] = {
        "email": "Please provide a valid email",
        "password": "Password should be at least 8 characters long",
    }

    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class SignupForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    field_messages: ClassVar[Dict[str, str]] = {
        "name": "Please provide a name",
        "email": "Please provide a valid email",
        "password": "Password should be at least 8 characters long",
    }

    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    password_confirm: str = Field(..., alias="passwordConfirm")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password_confirm")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise PydanticCustomError("password_mismatch", "Passwords provided do not match")
        return value


class ForgotPasswordForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    field_messages: ClassVar[Dict[str, str]] = {"email": "Please provide a valid email."}

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class NewPasswordForm(BaseModel):
    """Submitted from the reset page; carries the user id and token the page was rendered with."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    field_messages: ClassVar[Dict[str, str]] = {
        "password": "A password should be at least 8 characters long",
    }

    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    password_confirm: str = Field(..., alias="passwordConfirm")
    user_id: str = Field(..., alias="userId")
    reset_token: str = Field(..., alias="resetToken")

    @field_validator("password_confirm")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise PydanticCustomError("password_mismatch", "Passwords provided do not match")
        return value
