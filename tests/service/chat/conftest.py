import random
from typing import Optional

import pytest

from showroom_chat.client.llm.assistant import MessageList, ThreadMessage
from showroom_chat.model.chat.conversation import CatalogSubject, ConversationSession, ConversationTurn
from showroom_chat.service.chat.chat import ConversationOrchestrator
from showroom_chat.service.chat.errors import GatewayError
from showroom_chat.service.context.session_lock import InProcessSessionLocks

SHOP_ID = "5b0c2f0e-1d5a-4a53-9a52-0f7d7c1f8a10"
OTHER_SHOP_ID = "9a1d7e55-3f0b-4c1e-8e0a-2b6c4d8f1e22"
VEHICLE_ID = "123e4567-e89b-12d3-a456-426614174000"
OTHER_VEHICLE_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"

STEP1_PROMPTS = ["s1-a", "s1-b", "s1-c", "s1-d", "s1-e"]
STEP2_PROMPTS = ["s2-a", "s2-b", "s2-c", "s2-d"]


class StubStore:
    def __init__(self):
        self.sessions: dict[int, ConversationSession] = {}
        self.turns: list[ConversationTurn] = []
        self.prompts = {1: list(STEP1_PROMPTS), 2: list(STEP2_PROMPTS)}
        self.saves = 0

    def find_active_session(self, session_id: str, user_id: Optional[str]) -> Optional[ConversationSession]:
        for s in sorted(self.sessions.values(), key=lambda s: s.id, reverse=True):
            if s.session_id == session_id and s.user_id == user_id and s.is_active:
                return s.model_copy()
        return None

    def find_active_sessions_by_token(self, session_id: str) -> list[ConversationSession]:
        return [s.model_copy() for s in self.sessions.values() if s.session_id == session_id and s.is_active]

    def save_session(self, session: ConversationSession) -> ConversationSession:
        self.saves += 1
        if session.id is None:
            session = session.model_copy(update={"id": len(self.sessions) + 1})
        self.sessions[session.id] = session.model_copy()
        return session

    def append_turn(self, turn: ConversationTurn) -> None:
        self.turns.append(turn)

    def find_candidate_prompts(self, step: int) -> list[str]:
        return list(self.prompts.get(step, []))


class StubCatalog:
    def __init__(self, subjects: Optional[dict] = None):
        self.subjects = subjects or {}
        self.lookups: list[str] = []

    def find_subject(self, subject_id: str) -> Optional[CatalogSubject]:
        self.lookups.append(subject_id)
        return self.subjects.get(subject_id)


class StubGateway:
    def __init__(self, replies: Optional[list] = None):
        self.replies = list(replies or [])
        self.calls: list[tuple] = []
        self.threads_created = 0
        self.fail_step: Optional[str] = None

    def _maybe_fail(self, step: str) -> None:
        if self.fail_step == step:
            raise GatewayError(step, "stub failure", status_code=500, body="{}")

    async def create_thread(self) -> str:
        self._maybe_fail("create_thread")
        self.threads_created += 1
        thread_id = f"thread_{self.threads_created}"
        self.calls.append(("create_thread", thread_id))
        return thread_id

    async def post_user_turn(self, thread_id: str, text: str) -> None:
        self.calls.append(("post_message", thread_id, text))
        self._maybe_fail("post_message")

    async def start_run(self, thread_id: str) -> str:
        self.calls.append(("start_run", thread_id))
        self._maybe_fail("start_run")
        return "run_1"

    async def poll_run(self, thread_id: str, run_id: str) -> str:
        self.calls.append(("poll_run", thread_id, run_id))
        self._maybe_fail("poll_run")
        return "completed"

    async def fetch_messages(self, thread_id: str) -> MessageList:
        self.calls.append(("fetch_messages", thread_id))
        reply = self.replies.pop(0) if self.replies else '{"message": "Ok", "mood": "happy"}'
        return MessageList(messages=[ThreadMessage(role="assistant", text=reply)], raw='{"data": []}')

    async def delete_thread(self, thread_id: str) -> None:
        self.calls.append(("delete_thread", thread_id))
        self._maybe_fail("delete_thread")

    async def aclose(self) -> None:
        pass

    def steps(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def store():
    return StubStore()


@pytest.fixture
def catalog():
    return StubCatalog(
        {
            VEHICLE_ID: CatalogSubject(
                id=VEHICLE_ID,
                shop_id=SHOP_ID,
                shop_name="Auto Centro",
                label="Honda Civic-2021",
                photo_urls=["a.jpg", "b.jpg"],
            ),
            OTHER_VEHICLE_ID: CatalogSubject(
                id=OTHER_VEHICLE_ID,
                shop_id=OTHER_SHOP_ID,
                shop_name="Garagem Sul",
                label="Fiat Argo-2022",
                photo_urls=["c.jpg"],
            ),
        }
    )


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def orchestrator(store, catalog, gateway):
    return ConversationOrchestrator(store, catalog, gateway, locks=InProcessSessionLocks(), rng=random.Random(7))
