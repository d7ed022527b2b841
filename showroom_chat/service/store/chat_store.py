from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from showroom_chat.client.db.psql import session_scope
from showroom_chat.db.models.chat_message import ChatMessage
from showroom_chat.db.models.chat_question import ChatQuestion
from showroom_chat.db.models.chat_session import ChatSession
from showroom_chat.db.models.vehicle import Vehicle
from showroom_chat.model.chat.conversation import CatalogSubject, ConversationSession, ConversationTurn
from showroom_chat.model.chat.session_response import MessageItem, SessionSummary


def _to_session(row: ChatSession) -> ConversationSession:
    return ConversationSession(
        id=row.id,
        session_id=row.session_id,
        user_id=row.user_id,
        thread_id=row.thread_id,
        shop_id=row.shop_id,
        vehicle_id=row.vehicle_id,
        is_active=row.is_active,
        last_activity=row.last_activity,
    )


def _user_filter(user_id: Optional[str]):
    if user_id is None:
        return ChatSession.user_id.is_(None)
    return ChatSession.user_id == user_id


class ChatStore:
    """Chat sessions, their turn log and the follow-up prompt candidates."""

    def find_active_session(self, session_id: str, user_id: Optional[str]) -> Optional[ConversationSession]:
        with session_scope(read_only=True) as db:
            row = db.execute(
                select(ChatSession)
                .where(ChatSession.session_id == session_id, _user_filter(user_id), ChatSession.is_active.is_(True))
                .order_by(ChatSession.id.desc())
            ).scalars().first()
            return _to_session(row) if row is not None else None

    def find_active_sessions_by_token(self, session_id: str) -> list[ConversationSession]:
        with session_scope(read_only=True) as db:
            rows = db.execute(
                select(ChatSession).where(ChatSession.session_id == session_id, ChatSession.is_active.is_(True))
            ).scalars().all()
            return [_to_session(row) for row in rows]

    def save_session(self, session: ConversationSession) -> ConversationSession:
        with session_scope() as db:
            row = db.get(ChatSession, session.id) if session.id is not None else None
            if row is None:
                row = ChatSession(session_id=session.session_id, user_id=session.user_id)
                db.add(row)
            row.thread_id = session.thread_id
            row.shop_id = session.shop_id
            row.vehicle_id = session.vehicle_id
            row.is_active = session.is_active
            row.last_activity = session.last_activity
            db.flush()
            return session.model_copy(update={"id": row.id})

    def append_turn(self, turn: ConversationTurn) -> None:
        with session_scope() as db:
            db.add(
                ChatMessage(
                    chat_session_id=turn.chat_session_id,
                    content=turn.content,
                    is_from_user=turn.is_from_user,
                    timestamp=turn.timestamp,
                )
            )

    def find_candidate_prompts(self, step: int) -> list[str]:
        with session_scope(read_only=True) as db:
            return list(
                db.execute(
                    select(ChatQuestion.question)
                    .where(
                        ChatQuestion.step == step,
                        ChatQuestion.is_enabled.is_(True),
                        ChatQuestion.is_deleted.is_(False),
                    )
                    .order_by(ChatQuestion.id)
                ).scalars()
            )

    def list_sessions(self, user_id: Optional[str] = None) -> list[SessionSummary]:
        with session_scope(read_only=True) as db:
            counts = (
                select(ChatMessage.chat_session_id, func.count(ChatMessage.id).label("n"))
                .group_by(ChatMessage.chat_session_id)
                .subquery()
            )
            query = (
                select(ChatSession, func.coalesce(counts.c.n, 0))
                .outerjoin(counts, counts.c.chat_session_id == ChatSession.id)
                .order_by(ChatSession.last_activity.desc(), ChatSession.id.desc())
            )
            if user_id is not None:
                query = query.where(ChatSession.user_id == user_id)
            return [
                SessionSummary(
                    session_id=row.session_id,
                    user_id=row.user_id,
                    last_activity=row.last_activity,
                    is_active=row.is_active,
                    message_count=count,
                )
                for row, count in db.execute(query).all()
            ]

    def list_messages(self, session_id: str, user_id: Optional[str] = None) -> list[MessageItem]:
        with session_scope(read_only=True) as db:
            query = (
                select(ChatMessage.content, ChatMessage.is_from_user, ChatMessage.timestamp, ChatSession.user_id)
                .join(ChatSession, ChatSession.id == ChatMessage.chat_session_id)
                .where(ChatSession.session_id == session_id)
                .order_by(ChatMessage.timestamp, ChatMessage.id)
            )
            if user_id is not None:
                query = query.where(ChatSession.user_id == user_id)
            return [
                MessageItem(content=content, is_from_user=from_user, timestamp=ts, user_id=owner)
                for content, from_user, ts, owner in db.execute(query).all()
            ]

    def list_user_messages(self) -> list[str]:
        with session_scope(read_only=True) as db:
            return list(
                db.execute(
                    select(ChatMessage.content).where(ChatMessage.is_from_user.is_(True), ChatMessage.content != "")
                ).scalars()
            )


class VehicleCatalog:
    def find_subject(self, subject_id: str) -> Optional[CatalogSubject]:
        with session_scope(read_only=True) as db:
            vehicle = db.execute(
                select(Vehicle)
                .options(selectinload(Vehicle.photos), selectinload(Vehicle.shop))
                .where(Vehicle.id == str(subject_id), Vehicle.is_deleted.is_(False))
            ).scalar_one_or_none()
            if vehicle is None:
                return None
            return CatalogSubject(
                id=vehicle.id,
                shop_id=vehicle.shop_id,
                shop_name=vehicle.shop.name if vehicle.shop is not None else None,
                label=f"{vehicle.brand} {vehicle.model}-{vehicle.year}",
                photo_urls=[p.url for p in sorted(vehicle.photos, key=lambda p: p.display_order)],
            )

    def vehicle_ids_for_shop(self, shop_id: str) -> list[str]:
        with session_scope(read_only=True) as db:
            return list(
                db.execute(select(Vehicle.id).where(Vehicle.shop_id == str(shop_id))).scalars()
            )
