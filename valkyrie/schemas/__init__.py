"""
API schemas

Request/Response models for the HTTP API.
"""

from .guild_schema import GuildInput, GuildResponse
from .user_schema import (ChangePasswordInput, FieldError, ForgotPasswordInput,
                          LoginInput, MemberResponse, RegisterInput,
                          RequestResponse, RequestType, ResetPasswordInput,
                          UserResponse, Username, ValidationErrors)

__all__ = [
    "RegisterInput",
    "LoginInput",
    "ChangePasswordInput",
    "ForgotPasswordInput",
    "ResetPasswordInput",
    "UserResponse",
    "MemberResponse",
    "RequestResponse",
    "RequestType",
    "FieldError",
    "ValidationErrors",
    "Username",
    "GuildInput",
    "GuildResponse",
]
