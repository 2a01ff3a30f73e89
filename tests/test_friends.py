"""Friend requests and friend list"""

import pytest_asyncio

from valkyrie.models import FriendRequest
from valkyrie.repositories.friend_repository import FriendRepository


@pytest_asyncio.fixture
async def alice(client, register_user):
    body = await register_user(client, email="alice@example.com", username="alice")
    return client, body


@pytest_asyncio.fixture
async def bob(make_client, register_user):
    client = make_client()
    body = await register_user(client, email="bob@example.com", username="bob")
    return client, body


async def pending(client):
    response = await client.get("/account/me/pending")
    assert response.status_code == 200
    return response.json()


async def friends(client):
    response = await client.get("/account/me/friends")
    assert response.status_code == 200
    return response.json()


async def test_send_and_accept(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob

    response = await alice_client.post(f"/account/{bob_user['id']}/friend")
    assert response.status_code == 200
    assert response.json() is True

    assert await pending(alice_client) == [
        {"id": bob_user["id"], "username": "bob", "image": bob_user["image"], "type": 0}
    ]
    assert await pending(bob_client) == [
        {"id": alice_user["id"], "username": "alice", "image": alice_user["image"], "type": 1}
    ]

    response = await bob_client.post(f"/account/{alice_user['id']}/friend/accept")
    assert response.status_code == 200

    assert await pending(alice_client) == []
    assert await pending(bob_client) == []
    assert await friends(alice_client) == [
        {"id": bob_user["id"], "username": "bob", "image": bob_user["image"], "isOnline": False}
    ]
    assert [f["id"] for f in await friends(bob_client)] == [alice_user["id"]]


async def test_sending_twice_keeps_one_request(alice, bob):
    alice_client, _ = alice
    _, bob_user = bob

    await alice_client.post(f"/account/{bob_user['id']}/friend")
    response = await alice_client.post(f"/account/{bob_user['id']}/friend")

    assert response.status_code == 200
    assert len(await pending(alice_client)) == 1


async def test_mutual_requests_become_friendship(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob

    await alice_client.post(f"/account/{bob_user['id']}/friend")
    response = await bob_client.post(f"/account/{alice_user['id']}/friend")

    assert response.status_code == 200
    assert await pending(bob_client) == []
    assert [f["id"] for f in await friends(bob_client)] == [alice_user["id"]]


async def test_cannot_add_yourself(alice):
    alice_client, alice_user = alice

    response = await alice_client.post(f"/account/{alice_user['id']}/friend")

    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot add yourself"


async def test_unknown_member(alice):
    alice_client, _ = alice

    response = await alice_client.post("/account/123456789/friend")

    assert response.status_code == 404


async def test_already_friends(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    await alice_client.post(f"/account/{bob_user['id']}/friend")
    await bob_client.post(f"/account/{alice_user['id']}/friend/accept")

    response = await alice_client.post(f"/account/{bob_user['id']}/friend")

    assert response.status_code == 400
    assert response.json()["detail"] == "You are already friends"


async def test_accept_without_request(alice, bob):
    alice_client, _ = alice
    _, bob_user = bob

    response = await alice_client.post(f"/account/{bob_user['id']}/friend/accept")

    assert response.status_code == 404
    assert response.json()["detail"] == "Friend request not found"


async def test_sender_cannot_accept_own_request(alice, bob):
    alice_client, _ = alice
    _, bob_user = bob
    await alice_client.post(f"/account/{bob_user['id']}/friend")

    response = await alice_client.post(f"/account/{bob_user['id']}/friend/accept")

    assert response.status_code == 404


async def test_cancel_outgoing_request(alice, bob):
    alice_client, _ = alice
    bob_client, bob_user = bob
    await alice_client.post(f"/account/{bob_user['id']}/friend")

    response = await alice_client.post(f"/account/{bob_user['id']}/friend/cancel")

    assert response.status_code == 200
    assert await pending(alice_client) == []
    assert await pending(bob_client) == []


async def test_decline_incoming_request(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    await alice_client.post(f"/account/{bob_user['id']}/friend")

    response = await bob_client.post(f"/account/{alice_user['id']}/friend/cancel")

    assert response.status_code == 200
    assert await pending(alice_client) == []


async def test_remove_friend(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    await alice_client.post(f"/account/{bob_user['id']}/friend")
    await bob_client.post(f"/account/{alice_user['id']}/friend/accept")

    response = await alice_client.delete(f"/account/{bob_user['id']}/friend")

    assert response.status_code == 200
    assert response.json() is True
    assert await friends(alice_client) == []
    assert await friends(bob_client) == []


async def test_friend_routes_require_login(client):
    assert (await client.get("/account/me/friends")).status_code == 401
    assert (await client.get("/account/me/pending")).status_code == 401
    assert (await client.post("/account/1/friend")).status_code == 401
    assert (await client.delete("/account/1/friend")).status_code == 401


async def test_cancel_and_remove_twice_are_no_ops(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    await alice_client.post(f"/account/{bob_user['id']}/friend")

    for _ in range(2):
        response = await alice_client.post(f"/account/{bob_user['id']}/friend/cancel")
        assert response.status_code == 200
        assert response.json() is True

    await alice_client.post(f"/account/{bob_user['id']}/friend")
    await bob_client.post(f"/account/{alice_user['id']}/friend/accept")

    for _ in range(2):
        response = await alice_client.delete(f"/account/{bob_user['id']}/friend")
        assert response.status_code == 200
        assert response.json() is True

    assert await friends(alice_client) == []


async def test_pending_lists_incoming_before_outgoing(alice, bob, make_client, register_user):
    alice_client, alice_user = alice
    bob_client, _ = bob
    carol_client = make_client()
    carol = await register_user(carol_client, email="carol@example.com", username="carol")

    # alice -> carol first, so creation order alone would put outgoing first
    await alice_client.post(f"/account/{carol['id']}/friend")
    await bob_client.post(f"/account/{alice_user['id']}/friend")

    assert [(r["username"], r["type"]) for r in await pending(alice_client)] == [
        ("bob", 1),
        ("carol", 0),
    ]


async def test_accept_after_parallel_accept(alice, bob, session_factory, monkeypatch):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    await alice_client.post(f"/account/{bob_user['id']}/friend")
    await bob_client.post(f"/account/{alice_user['id']}/friend/accept")

    # a second request row that a parallel accept left behind
    async with session_factory() as db:
        db.add(FriendRequest(sender_id=alice_user["id"], receiver_id=bob_user["id"]))
        await db.commit()

    async def not_friends(self, db, user_id, member_id):
        return False

    monkeypatch.setattr(FriendRepository, "are_friends", not_friends)

    response = await bob_client.post(f"/account/{alice_user['id']}/friend/accept")

    assert response.status_code == 200
    assert response.json() is True
    assert await pending(bob_client) == []
    assert [f["id"] for f in await friends(bob_client)] == [alice_user["id"]]
