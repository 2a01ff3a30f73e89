from datetime import datetime
from enum import IntEnum
from typing import Annotated

from pydantic import (BaseModel, ConfigDict, EmailStr, Field, StringConstraints,
                      ValidationInfo, field_validator)
from pydantic.alias_generators import to_camel

from valkyrie.utils.datetime import ensure_utc

# Surrounding whitespace is stripped before the length check. Passwords are
# taken as typed.
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=30)]
Password = Annotated[str, Field(min_length=6, max_length=150, description="Password (6-150)")]


def clean_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class CamelModel(BaseModel):
    """
    JSON keys are camelCase (currentPassword, isOnline, ...), attributes
    stay snake_case.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# -------------------- #
# Requests
# -------------------- #

class RegisterInput(CamelModel):
    email: EmailStr = Field(..., description="Email address")
    username: Username
    password: Password

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return clean_email(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "valkyrie@example.com",
                "username": "valkyrie",
                "password": "password",
            }
        }
    )


class LoginInput(CamelModel):
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return clean_email(value)


class ChangePasswordInput(CamelModel):
    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: Password
    confirm_new_password: str = Field(..., description="Must equal newPassword")

    @field_validator("confirm_new_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "new_password" in info.data and value != info.data["new_password"]:
            raise ValueError("Passwords do not match")
        return value


class ForgotPasswordInput(CamelModel):
    email: EmailStr = Field(..., description="Email address")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return clean_email(value)


class ResetPasswordInput(CamelModel):
    token: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = Field(
        ..., description="Token from the reset mail"
    )
    new_password: Password
    confirm_new_password: str = Field(..., description="Must equal newPassword")

    @field_validator("confirm_new_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "new_password" in info.data and value != info.data["new_password"]:
            raise ValueError("Passwords do not match")
        return value


# -------------------- #
# Responses
# -------------------- #

class UserResponse(CamelModel):
    id: str
    username: str
    email: str
    image: str
    is_online: bool
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "131205158396829696",
                "username": "valkyrie",
                "email": "valkyrie@example.com",
                "image": "https://gravatar.com/avatar/0c5e?d=identicon",
                "isOnline": False,
                "createdAt": "2024-01-01T10:00:00Z",
                "updatedAt": "2024-01-01T10:00:00Z",
            }
        }
    )


class MemberResponse(CamelModel):
    id: str
    username: str
    image: str
    is_online: bool


class RequestType(IntEnum):
    OUTGOING = 0
    INCOMING = 1


class RequestResponse(CamelModel):
    id: str
    username: str
    image: str
    type: RequestType


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrors(BaseModel):
    errors: list[FieldError]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"errors": [{"field": "email", "message": "Email already in use"}]}
        }
    )
