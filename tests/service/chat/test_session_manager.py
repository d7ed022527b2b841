import pytest

from showroom_chat.model.chat.conversation import ConversationSession
from showroom_chat.service.chat.errors import GatewayError
from showroom_chat.service.chat.session_manager import SessionManager

SHOP_ID = "5b0c2f0e-1d5a-4a53-9a52-0f7d7c1f8a10"
VEHICLE_ID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.fixture
def manager(store, gateway):
    return SessionManager(store, gateway)


@pytest.mark.asyncio
async def test_resolve_creates_session_with_thread(manager, store, gateway):
    session = await manager.resolve("tok", None, SHOP_ID, VEHICLE_ID)

    assert session.id == 1
    assert session.thread_id == "thread_1"
    assert session.is_active
    assert store.saves == 1


@pytest.mark.asyncio
async def test_resolve_reuses_matching_session(manager, gateway):
    first = await manager.resolve("tok", "u1", SHOP_ID, VEHICLE_ID)
    second = await manager.resolve("tok", "u1", SHOP_ID, VEHICLE_ID)

    assert second.id == first.id
    assert gateway.threads_created == 1


@pytest.mark.asyncio
async def test_resolve_retires_session_on_context_change(manager, store):
    first = await manager.resolve("tok", None, SHOP_ID, VEHICLE_ID)
    second = await manager.resolve("tok", None, None, None)

    assert second.id != first.id
    assert store.sessions[first.id].is_active is False
    assert second.thread_id == "thread_2"


@pytest.mark.asyncio
async def test_resolve_fails_when_thread_cannot_be_created(manager, store, gateway):
    gateway.fail_step = "create_thread"

    with pytest.raises(GatewayError):
        await manager.resolve("tok", None, None, None)

    assert store.sessions == {}


@pytest.mark.asyncio
async def test_ensure_thread_is_idempotent(manager, store, gateway):
    session = await manager.resolve("tok", None, None, None)
    saves, calls = store.saves, list(gateway.calls)

    again = await manager.ensure_thread(session)
    again = await manager.ensure_thread(again)

    assert again == session
    assert gateway.calls == calls
    assert store.saves == saves


@pytest.mark.asyncio
async def test_ensure_thread_attaches_missing_thread(manager, store):
    session = store.save_session(ConversationSession(session_id="tok", thread_id=None))

    session = await manager.ensure_thread(session)

    assert session.thread_id == "thread_1"
    assert store.sessions[session.id].thread_id == "thread_1"


def test_touch_bumps_last_activity(manager, store):
    session = store.save_session(ConversationSession(session_id="tok", thread_id="t"))
    before = session.last_activity

    touched = manager.touch(session)

    assert touched.last_activity >= before
    assert store.sessions[session.id].last_activity == touched.last_activity


@pytest.mark.asyncio
async def test_invalidate_deletes_remote_threads(manager, store, gateway):
    await manager.resolve("tok", None, None, None)
    await manager.resolve("tok", "u1", None, None)

    assert await manager.invalidate("tok") == 2

    assert all(not s.is_active for s in store.sessions.values())
    assert [c for c in gateway.calls if c[0] == "delete_thread"] == [
        ("delete_thread", "thread_1"),
        ("delete_thread", "thread_2"),
    ]


@pytest.mark.asyncio
async def test_invalidate_skips_remote_delete_without_thread(manager, store, gateway):
    store.save_session(ConversationSession(session_id="tok", thread_id=None))

    await manager.invalidate("tok")

    assert gateway.calls == []
    assert store.find_active_session("tok", None) is None
