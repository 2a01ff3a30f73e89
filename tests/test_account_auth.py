"""Register / login / logout and the session guard."""

from datetime import timedelta

from sqlmodel import select

from valkyrie.core.config import settings
from valkyrie.models import User, UserSession
from valkyrie.repositories.user_repository import UserRepository
from valkyrie.utils.datetime import utc_now


class TestRegister:
    async def test_register_creates_user_and_logs_in(self, client, register_user):
        body = await register_user(client, email=" Valkyrie@Example.com ", username="valkyrie")

        assert body["email"] == "valkyrie@example.com"
        assert body["username"] == "valkyrie"
        assert body["isOnline"] is False
        assert body["image"].startswith("https://gravatar.com/avatar/")
        assert {"id", "createdAt", "updatedAt"} <= body.keys()
        assert "password" not in body
        assert client.cookies.get(settings.COOKIE_NAME)

        response = await client.get("/account")
        assert response.status_code == 200
        assert response.json()["id"] == body["id"]

    async def test_password_is_stored_hashed(self, client, register_user, session):
        body = await register_user(client)

        user = await session.get(User, body["id"])
        assert user.password != "password"
        assert user.verify_password("password")

    async def test_duplicate_email(self, client, make_client, register_user):
        await register_user(client)

        response = await make_client().post(
            "/account/register",
            json={"email": "VALKYRIE@example.com", "username": "other", "password": "password"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "errors": [{"field": "email", "message": "Email already in use"}]
        }

    async def test_invalid_fields_are_reported_per_field(self, client):
        response = await client.post(
            "/account/register",
            json={"email": "not-an-email", "username": "ab", "password": "123"},
        )

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"email", "username", "password"}
        assert not client.cookies.get(settings.COOKIE_NAME)

    async def test_email_registered_between_check_and_insert(
        self, client, make_client, register_user, monkeypatch
    ):
        await register_user(client)

        async def no_conflict(self, db, email, exclude_id=None):
            return False

        monkeypatch.setattr(UserRepository, "exists_by_email", no_conflict)

        response = await make_client().post(
            "/account/register",
            json={"email": "valkyrie@example.com", "username": "other", "password": "password"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "errors": [{"field": "email", "message": "Email already in use"}]
        }

    async def test_username_is_trimmed_before_length_check(self, client):
        response = await client.post(
            "/account/register",
            json={"email": "valkyrie@example.com", "username": "  ab  ", "password": "password"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "username"

    async def test_password_whitespace_is_kept(self, client, make_client, register_user):
        await register_user(client, password="  spaced out  ")

        other = make_client()
        trimmed = await other.post(
            "/account/login", json={"email": "valkyrie@example.com", "password": "spaced out"}
        )
        exact = await other.post(
            "/account/login", json={"email": "valkyrie@example.com", "password": "  spaced out  "}
        )

        assert trimmed.status_code == 401
        assert exact.status_code == 200

    async def test_timestamps_carry_utc_offset(self, client, register_user):
        body = await register_user(client)

        assert body["createdAt"].endswith("Z")
        assert body["updatedAt"].endswith("Z")

    async def test_missing_field(self, client):
        response = await client.post(
            "/account/register", json={"email": "valkyrie@example.com", "password": "password"}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "username"


class TestLogin:
    async def test_login(self, make_client, user):
        other = make_client()

        response = await other.post(
            "/account/login", json={"email": "VALKYRIE@example.com", "password": "password"}
        )

        assert response.status_code == 200
        assert response.json()["id"] == user["id"]
        assert other.cookies.get(settings.COOKIE_NAME)
        assert (await other.get("/account")).status_code == 200

    async def test_wrong_password(self, make_client, user):
        other = make_client()

        response = await other.post(
            "/account/login", json={"email": "valkyrie@example.com", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid Credentials"
        assert not other.cookies.get(settings.COOKIE_NAME)

    async def test_unknown_email(self, client):
        response = await client.post(
            "/account/login", json={"email": "nobody@example.com", "password": "password"}
        )

        assert response.status_code == 401

    async def test_each_login_gets_its_own_session(self, make_client, user, session):
        await make_client().post(
            "/account/login", json={"email": "valkyrie@example.com", "password": "password"}
        )

        result = await session.execute(select(UserSession).where(UserSession.user_id == user["id"]))
        assert len(result.scalars().all()) == 2


class TestSessionGuard:
    async def test_no_cookie(self, client):
        response = await client.get("/account")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    async def test_unknown_token(self, client):
        client.cookies.set(settings.COOKIE_NAME, "forged-token")

        assert (await client.get("/account")).status_code == 401

    async def test_logout_ends_session(self, client, user, session):
        token = client.cookies.get(settings.COOKIE_NAME)

        response = await client.post("/account/logout")

        assert response.status_code == 200
        assert response.json() is True
        assert not client.cookies.get(settings.COOKIE_NAME)
        assert await session.get(UserSession, token) is None

        # replaying the old cookie does not work either
        client.cookies.set(settings.COOKIE_NAME, token)
        assert (await client.get("/account")).status_code == 401

    async def test_logout_without_session(self, client):
        response = await client.post("/account/logout")

        assert response.status_code == 200
        assert response.json() is True

    async def test_expired_session_is_rejected_and_removed(self, client, user, session_factory):
        token = client.cookies.get(settings.COOKIE_NAME)
        async with session_factory() as db:
            row = await db.get(UserSession, token)
            row.expires_at = utc_now() - timedelta(minutes=1)
            await db.commit()

        assert (await client.get("/account")).status_code == 401

        async with session_factory() as db:
            assert await db.get(UserSession, token) is None
