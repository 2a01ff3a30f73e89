# valkyrie/clients/account_client.py
from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx answer from the API."""

    def __init__(
        self,
        status_code: int,
        detail: Any = None,
        errors: list[dict[str, str]] | None = None,
    ):
        super().__init__(f"{status_code}: {detail or errors}")
        self.status_code = status_code
        self.detail = detail
        self.errors = errors or []

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            return cls(response.status_code, detail=response.text)

        if not isinstance(body, dict):
            return cls(response.status_code, detail=body)
        return cls(response.status_code, detail=body.get("detail"), errors=body.get("errors"))


def to_error_map(error: ApiError) -> dict[str, str]:
    """
    Field errors of a failed request as {field: message}, ready to be shown
    next to the form inputs. The first message per field wins.
    """
    error_map: dict[str, str] = {}
    for item in error.errors:
        error_map.setdefault(item["field"], item["message"])
    return error_map


class AccountClient:
    """
    Async client for the /account endpoints. The session cookie set by
    register/login/reset-password is kept in the client's cookie jar.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "AccountClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, url, **kwargs)
        if response.is_error:
            logger.debug(f"{method} {url} failed: {response.status_code} {response.text}")
            raise ApiError.from_response(response)
        return response.json()

    # ========== auth ==========

    async def register(self, email: str, username: str, password: str) -> dict:
        return await self._request(
            "POST",
            "/account/register",
            json={"email": email, "username": username, "password": password},
        )

    async def login(self, email: str, password: str) -> dict:
        return await self._request(
            "POST", "/account/login", json={"email": email, "password": password}
        )

    async def logout(self) -> bool:
        return await self._request("POST", "/account/logout")

    async def change_password(
        self, current_password: str, new_password: str, confirm_new_password: str
    ) -> bool:
        return await self._request(
            "PUT",
            "/account/change-password",
            json={
                "currentPassword": current_password,
                "newPassword": new_password,
                "confirmNewPassword": confirm_new_password,
            },
        )

    async def forgot_password(self, email: str) -> bool:
        return await self._request("POST", "/account/forgot-password", json={"email": email})

    async def reset_password(
        self, token: str, new_password: str, confirm_new_password: str
    ) -> dict:
        return await self._request(
            "POST",
            "/account/reset-password",
            json={
                "token": token,
                "newPassword": new_password,
                "confirmNewPassword": confirm_new_password,
            },
        )

    # ========== account ==========

    async def get_account(self) -> dict:
        return await self._request("GET", "/account")

    async def update_account(
        self,
        email: str,
        username: str,
        image: bytes | None = None,
        *,
        filename: str = "avatar.png",
        content_type: str = "image/png",
    ) -> dict:
        """multipart update; image is only sent when a new avatar was picked"""
        files = {"image": (filename, image, content_type)} if image is not None else None
        return await self._request(
            "PUT",
            "/account",
            data={"email": email, "username": username},
            files=files,
        )

    # ========== friends ==========

    async def get_friends(self) -> list[dict]:
        return await self._request("GET", "/account/me/friends")

    async def get_pending_requests(self) -> list[dict]:
        return await self._request("GET", "/account/me/pending")

    async def send_friend_request(self, member_id: str) -> bool:
        return await self._request("POST", f"/account/{member_id}/friend")

    async def accept_friend_request(self, member_id: str) -> bool:
        return await self._request("POST", f"/account/{member_id}/friend/accept")

    async def cancel_friend_request(self, member_id: str) -> bool:
        return await self._request("POST", f"/account/{member_id}/friend/cancel")

    async def remove_friend(self, member_id: str) -> bool:
        return await self._request("DELETE", f"/account/{member_id}/friend")
