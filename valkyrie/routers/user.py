# routers/user.py
from typing import Annotated, List, Optional, Union

from fastapi import Depends, File, Form, Response, UploadFile, status
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.database import get_session
from valkyrie.schemas import (ChangePasswordInput, ForgotPasswordInput,
                              LoginInput, MemberResponse, RegisterInput,
                              RequestResponse, ResetPasswordInput,
                              UserResponse, Username, ValidationErrors)
from valkyrie.services import AuthService, UserService
from valkyrie.utils.dependencies import (clear_session_cookie,
                                         get_auth_service,
                                         get_current_user_id,
                                         get_session_token, get_user_service,
                                         set_session_cookie)
from valkyrie.utils.router_utils import get_router

router = get_router("account", "Account Operation")

UNAUTHORIZED = {401: {"description": "Not authenticated"}}
BAD_REQUEST = {400: {"model": ValidationErrors, "description": "Validation errors"}}


# ----------------------------------------------------------------------
# Authentication
# ----------------------------------------------------------------------

@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Account",
    responses={201: {"description": "Newly Created User"}, **BAD_REQUEST},
)
async def register(
    credentials: RegisterInput,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """
    Create an account and log it in.

    - **email**: unique email address
    - **username**: 3-30 characters
    - **password**: 6-150 characters
    """
    user = await auth_service.register(db, credentials)
    session = await auth_service.start_session(db, user.id)
    set_session_cookie(response, session.token)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=UserResponse,
    summary="User Login",
    responses={200: {"description": "Current User"}, 401: {"description": "Invalid credentials"}},
)
async def login(
    credentials: LoginInput,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    user = await auth_service.login(db, credentials)
    session = await auth_service.start_session(db, user.id)
    set_session_cookie(response, session.token)
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=bool, summary="User Logout")
async def logout(
    response: Response,
    db: Annotated[AsyncSession, Depends(get_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[Optional[str], Depends(get_session_token)],
):
    await auth_service.end_session(db, token)
    clear_session_cookie(response)
    return True


# ----------------------------------------------------------------------
# Passwords
# ----------------------------------------------------------------------

@router.put(
    "/change-password",
    response_model=bool,
    summary="Change Current User Password",
    responses={200: {"description": "Successfully changed password"}, **BAD_REQUEST, **UNAUTHORIZED},
)
async def change_password(
    data: ChangePasswordInput,
    user_id: Annotated[str, Depends(get_current_user_id)],
    token: Annotated[Optional[str], Depends(get_session_token)],
    db: Annotated[AsyncSession, Depends(get_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """
    Other sessions of the account are signed out.
    """
    return await auth_service.change_password(db, user_id, data, current_token=token)


@router.post(
    "/forgot-password",
    response_model=bool,
    summary="Forgot Password Request",
    responses={200: {"description": "Send Email"}, **BAD_REQUEST},
)
async def forgot_password(
    data: ForgotPasswordInput,
    db: Annotated[AsyncSession, Depends(get_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    return await auth_service.forgot_password(db, data.email)


@router.post(
    "/reset-password",
    response_model=UserResponse,
    summary="Reset Password",
    responses={200: {"description": "Successfully reset password"}, **BAD_REQUEST},
)
async def reset_password(
    data: ResetPasswordInput,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """
    Set a new password with the mailed token and log the user in.
    """
    user = await auth_service.reset_password(db, data)
    session = await auth_service.start_session(db, user.id)
    set_session_cookie(response, session.token)
    return UserResponse.model_validate(user)


# ----------------------------------------------------------------------
# Current user
# ----------------------------------------------------------------------

@router.get(
    "",
    response_model=UserResponse,
    summary="Get Current User",
    responses=UNAUTHORIZED,
)
async def find_current_user(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return await service.get_current_user(db, user_id)


@router.put(
    "",
    response_model=UserResponse,
    summary="Update Current User",
    responses={200: {"description": "Update Success"}, **BAD_REQUEST, **UNAUTHORIZED},
)
async def update(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
    email: Annotated[EmailStr, Form()],
    username: Annotated[Username, Form()],
    image: Annotated[
        Union[UploadFile, str, None], File(description="New avatar, or the current image URL to keep it")
    ] = None,
):
    """
    multipart/form-data

    - **email**: unique email address
    - **username**: 3-30 characters after trimming
    - **image**: optional avatar file (image/*); a plain string keeps the current avatar
    """
    return await service.update_user(db, user_id, email, username, image)


# ----------------------------------------------------------------------
# Friends
# ----------------------------------------------------------------------

@router.get(
    "/me/friends",
    response_model=List[MemberResponse],
    summary="Get Current User's friends",
    responses=UNAUTHORIZED,
)
async def get_friends(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return await service.get_friends(db, user_id)


@router.get(
    "/me/pending",
    response_model=List[RequestResponse],
    summary="Get Current User's friend requests",
    responses=UNAUTHORIZED,
)
async def get_friend_requests(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """
    **type**: 1 = incoming request, 0 = outgoing request
    """
    return await service.get_pending_friend_requests(db, user_id)


@router.post(
    "/{member_id}/friend",
    response_model=bool,
    summary="Add Friend",
    responses={200: {"description": "Successfully send a friend request"}, **UNAUTHORIZED},
)
async def send_friend_request(
    member_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return await service.send_friend_request(db, user_id, member_id)


@router.post(
    "/{member_id}/friend/accept",
    response_model=bool,
    summary="Accept Friend Request",
    responses={200: {"description": "Successfully added as friend"}, **UNAUTHORIZED},
)
async def add_friend(
    member_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return await service.accept_friend_request(db, user_id, member_id)


@router.post(
    "/{member_id}/friend/cancel",
    response_model=bool,
    summary="Cancel Friend Request",
    responses={200: {"description": "Successfully canceled the request"}, **UNAUTHORIZED},
)
async def cancel_friend_request(
    member_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return await service.cancel_friend_request(db, user_id, member_id)


@router.delete(
    "/{member_id}/friend",
    response_model=bool,
    summary="Remove Friend",
    responses={200: {"description": "Successfully removed friend"}, **UNAUTHORIZED},
)
async def remove_friend(
    member_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return await service.remove_friend(db, user_id, member_id)
