from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol
from datetime import datetime

from showroom_chat.model.chat.conversation import ConversationSession, utcnow
from showroom_chat.service.chat.errors import GatewayError

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def find_active_session(self, session_id: str, user_id: Optional[str]) -> Optional[ConversationSession]: ...

    def find_active_sessions_by_token(self, session_id: str) -> list[ConversationSession]: ...

    def save_session(self, session: ConversationSession) -> ConversationSession: ...


class ThreadCreator(Protocol):
    async def create_thread(self) -> str: ...

    async def delete_thread(self, thread_id: str) -> None: ...


class SessionManager:
    """
    Maps a client session token to its persisted session and remote thread.

    A session is pinned to the (shop, vehicle) context it was opened with;
    a request carrying a different context retires it and opens a new one
    under the same token, with a fresh thread.
    """

    def __init__(self, store: SessionStore, gateway: ThreadCreator, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.gateway = gateway
        self.clock = clock

    async def resolve(
        self,
        session_id: str,
        user_id: Optional[str],
        shop_id: Optional[str],
        vehicle_id: Optional[str],
    ) -> ConversationSession:
        session = self.store.find_active_session(session_id, user_id)

        if session is not None and session.context() != (shop_id, vehicle_id):
            logger.info(
                "context changed, retiring session session_id=%s old=%s new=%s",
                session_id,
                session.context(),
                (shop_id, vehicle_id),
            )
            session.is_active = False
            self.store.save_session(session)
            session = None

        if session is not None:
            return session

        thread_id = await self.gateway.create_thread()
        return self.store.save_session(
            ConversationSession(
                session_id=session_id,
                user_id=user_id,
                thread_id=thread_id,
                shop_id=shop_id,
                vehicle_id=vehicle_id,
                is_active=True,
                last_activity=self.clock(),
            )
        )

    async def ensure_thread(self, session: ConversationSession) -> ConversationSession:
        if session.thread_id:
            return session
        logger.info("session has no thread, creating one session_id=%s", session.session_id)
        session.thread_id = await self.gateway.create_thread()
        return self.store.save_session(session)

    def touch(self, session: ConversationSession) -> ConversationSession:
        session.last_activity = self.clock()
        return self.store.save_session(session)

    async def invalidate(self, session_id: str) -> int:
        """Retire every active session of the token. Remote thread deletion is best-effort."""
        sessions = self.store.find_active_sessions_by_token(session_id)
        for session in sessions:
            if session.thread_id:
                try:
                    await self.gateway.delete_thread(session.thread_id)
                except GatewayError:
                    logger.warning(
                        "remote thread delete failed session_id=%s thread_id=%s",
                        session_id,
                        session.thread_id,
                        exc_info=True,
                    )
            session.is_active = False
            self.store.save_session(session)
        return len(sessions)
