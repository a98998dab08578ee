"""Tests for connected-only messaging."""

from datetime import timedelta

import pytest

from careerconnect.errors import AuthorizationError, ValidationError
from careerconnect.realtime import manager
from careerconnect.services import connections as connection_service
from careerconnect.services import messages as message_service
from careerconnect.utils.clock import utcnow

from conftest import RecordingSocket


@pytest.fixture
async def connected(make_user):
    alice = await make_user(name="Alice Example")
    bob = await make_user(name="Bob Example")
    connection, _ = await connection_service.request_connection(alice, bob["_id"])
    await connection_service.respond(connection["_id"], bob, "accept")
    return alice, bob


class TestSend:
    async def test_strangers_cannot_chat(self, make_user):
        alice = await make_user()
        bob = await make_user()
        with pytest.raises(AuthorizationError) as exc:
            await message_service.send_message(alice, bob["_id"], "hello")
        assert exc.value.message == "You must be connected to chat."

    async def test_pending_connection_is_not_enough(self, make_user):
        alice = await make_user()
        bob = await make_user()
        await connection_service.request_connection(alice, bob["_id"])
        with pytest.raises(AuthorizationError):
            await message_service.send_message(alice, bob["_id"], "hello")

    async def test_connection_checked_before_content(self, make_user):
        alice = await make_user()
        bob = await make_user()
        with pytest.raises(AuthorizationError):
            await message_service.send_message(alice, bob["_id"], "   ")

    async def test_blank_content_rejected(self, connected):
        alice, bob = connected
        with pytest.raises(ValidationError):
            await message_service.send_message(alice, bob["_id"], "   ")

    async def test_persists_and_fans_out(self, db, connected):
        alice, bob = connected
        alice_tab, bob_tab_one, bob_tab_two = RecordingSocket(), RecordingSocket(), RecordingSocket()
        manager.join(alice["_id"], alice_tab)
        manager.join(bob["_id"], bob_tab_one)
        manager.join(bob["_id"], bob_tab_two)

        message = await message_service.send_message(alice, str(bob["_id"]), "Hi Bob")

        assert await db.messages.count_documents({}) == 1
        for tab in (bob_tab_one, bob_tab_two):
            received = tab.events("receive-message")
            assert len(received) == 1
            assert received[0]["data"]["content"] == "Hi Bob"
            assert received[0]["data"]["from"] == str(alice["_id"])
        assert alice_tab.events("message-sent")[0]["data"]["id"] == str(message["_id"])

    async def test_broken_recipient_socket_does_not_fail_send(self, db, connected):
        alice, bob = connected
        manager.join(bob["_id"], RecordingSocket(fail=True))

        message = await message_service.send_message(alice, bob["_id"], "hello")

        assert message["content"] == "hello"
        assert await db.messages.count_documents({}) == 1
        assert not manager.is_online(bob["_id"])

    async def test_offline_recipient_still_persisted(self, db, connected):
        alice, bob = connected
        await message_service.send_message(alice, bob["_id"], "Are you there?")
        assert await db.messages.count_documents({"receiver": bob["_id"]}) == 1


class TestHistory:
    async def _seed(self, db, alice, bob, count):
        base = utcnow() - timedelta(hours=1)
        for i in range(count):
            sender, receiver = (alice, bob) if i % 2 == 0 else (bob, alice)
            await db.messages.insert_one({
                "sender": sender["_id"],
                "receiver": receiver["_id"],
                "content": f"message {i}",
                "read": False,
                "created_at": base + timedelta(seconds=i),
                "updated_at": base + timedelta(seconds=i),
            })
        return base

    async def test_oldest_first_both_directions(self, db, connected):
        alice, bob = connected
        await self._seed(db, alice, bob, 4)

        history = await message_service.list_messages(bob, alice["_id"])
        assert [m["content"] for m in history] == ["message 0", "message 1", "message 2", "message 3"]

    async def test_limit_keeps_newest(self, db, connected):
        alice, bob = connected
        await self._seed(db, alice, bob, 6)

        history = await message_service.list_messages(alice, bob["_id"], limit=2)
        assert [m["content"] for m in history] == ["message 4", "message 5"]

    async def test_before_pages_backwards(self, db, connected):
        alice, bob = connected
        base = await self._seed(db, alice, bob, 6)

        history = await message_service.list_messages(alice, bob["_id"], limit=2, before=base + timedelta(seconds=3))
        assert [m["content"] for m in history] == ["message 1", "message 2"]

    async def test_not_connected(self, make_user):
        alice = await make_user()
        bob = await make_user()
        with pytest.raises(AuthorizationError) as exc:
            await message_service.list_messages(alice, bob["_id"])
        assert exc.value.message == "You must be connected to view messages."

    def test_clamp_limit(self):
        assert message_service.clamp_limit(None) == 50
        assert message_service.clamp_limit(5000) == 200
        assert message_service.clamp_limit(-3) == 1

    async def test_mark_read(self, db, connected):
        alice, bob = connected
        await message_service.send_message(alice, bob["_id"], "one")
        await message_service.send_message(alice, bob["_id"], "two")
        await message_service.send_message(bob, alice["_id"], "reply")

        assert await message_service.mark_read(bob, alice["_id"]) == 2
        assert await db.messages.count_documents({"read": False}) == 1
