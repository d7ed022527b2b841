import logging
import random
from typing import Optional

import showroom_chat.config.config as configs
from showroom_chat.client.llm.assistant import ThreadGateway
from showroom_chat.model.chat.chat_request import ChatRequest
from showroom_chat.model.chat.chat_response import ChatResponse
from showroom_chat.model.chat.conversation import CatalogSubject, ConversationSession, ConversationTurn
from showroom_chat.model.chat.session_response import KeywordCount, MessageItem, SessionSummary
from showroom_chat.service.chat.errors import ChatValidationError
from showroom_chat.service.chat.keywords import top_keywords
from showroom_chat.service.chat.parser import parse_reply
from showroom_chat.service.chat.photos import PhotoEnricher, SubjectCatalog
from showroom_chat.service.chat.session_manager import SessionManager
from showroom_chat.service.context.session_lock import build_session_locks
from showroom_chat.service.store.chat_store import ChatStore, VehicleCatalog

logger = logging.getLogger(__name__)

STEP_STARTED = 1
STEP_VEHICLE_SHOWN = 2


def context_header(subject: CatalogSubject) -> str:
    return f"Shop: {subject.shop_name or subject.shop_id} | Vehicle: {subject.label} ID: {subject.id} | "


class ConversationOrchestrator:
    """
    Runs one chat turn end to end.

    resolve session -> ensure thread -> store visitor turn -> post + run + poll
    -> fetch reply -> parse -> photos -> store assistant turn -> follow-ups

    The visitor's turn is stored before the remote leg so it survives an
    assistant failure; the assistant turn is only stored on success.
    """

    def __init__(
        self,
        store,
        catalog: SubjectCatalog,
        gateway,
        locks=None,
        rng: Optional[random.Random] = None,
        follow_up_count: Optional[int] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.gateway = gateway
        self.sessions = SessionManager(store, gateway)
        self.enricher = PhotoEnricher(catalog)
        self.locks = locks if locks is not None else build_session_locks()
        self.rng = rng or random.Random()
        self.follow_up_count = configs.FOLLOW_UP_PROMPT_COUNT if follow_up_count is None else follow_up_count

    def _prepare_message(self, req: ChatRequest) -> str:
        if not req.message.strip():
            raise ChatValidationError("message must not be empty")
        if req.vehicle_id is None:
            return req.message
        if req.shop_id is None:
            raise ChatValidationError("shop_id is required when vehicle_id is given")

        subject = self.catalog.find_subject(str(req.vehicle_id))
        if subject is None or subject.shop_id != str(req.shop_id):
            raise ChatValidationError("vehicle not found or does not belong to the given shop")
        return context_header(subject) + req.message

    def follow_up_prompts(self, step: int, rng: Optional[random.Random] = None) -> list[str]:
        candidates = self.store.find_candidate_prompts(step)
        return (rng or self.rng).sample(candidates, min(self.follow_up_count, len(candidates)))

    async def send_message(self, req: ChatRequest, rng: Optional[random.Random] = None) -> ChatResponse:
        text = self._prepare_message(req)
        shop_id = str(req.shop_id) if req.shop_id is not None else None
        vehicle_id = str(req.vehicle_id) if req.vehicle_id is not None else None

        async with self.locks.hold(req.session_id):
            session = await self.sessions.resolve(req.session_id, req.user_id, shop_id, vehicle_id)
            session = await self.sessions.ensure_thread(session)
            session = self.sessions.touch(session)

            self.store.append_turn(ConversationTurn(chat_session_id=session.id, content=text, is_from_user=True))

            listing = await self._run_turn(session, text)
            reply_text = listing.latest_assistant_text()
            parsed = parse_reply(reply_text, listing.raw)
            parsed.photos = self.enricher.enrich(parsed.message, reply_text if reply_text != parsed.message else None)

            self.store.append_turn(
                ConversationTurn(chat_session_id=session.id, content=parsed.message, is_from_user=False)
            )

        step = STEP_VEHICLE_SHOWN if parsed.photos else STEP_STARTED
        logger.info(
            "chat turn completed session_id=%s mood=%s photos=%s", req.session_id, parsed.mood, len(parsed.photos or [])
        )
        return ChatResponse(
            session_id=req.session_id,
            message=parsed.message,
            mood=parsed.mood,
            photos=parsed.photos,
            follow_up_prompts=self.follow_up_prompts(step, rng),
        )

    async def _run_turn(self, session: ConversationSession, text: str):
        await self.gateway.post_user_turn(session.thread_id, text)
        run_id = await self.gateway.start_run(session.thread_id)
        await self.gateway.poll_run(session.thread_id, run_id)
        return await self.gateway.fetch_messages(session.thread_id)

    async def reset(self, session_id: str) -> int:
        async with self.locks.hold(session_id):
            return await self.sessions.invalidate(session_id)


_orchestrator: Optional[ConversationOrchestrator] = None


def get_orchestrator() -> ConversationOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ConversationOrchestrator(ChatStore(), VehicleCatalog(), ThreadGateway())
    return _orchestrator


async def close_orchestrator() -> None:
    global _orchestrator
    if _orchestrator is not None:
        await _orchestrator.gateway.aclose()
        _orchestrator = None


async def chat_service(req: ChatRequest) -> ChatResponse:
    return await get_orchestrator().send_message(req)


async def reset_service(session_id: str) -> int:
    return await get_orchestrator().reset(session_id)


def sessions_service(user_id: Optional[str] = None) -> list[SessionSummary]:
    return ChatStore().list_sessions(user_id)


def messages_service(session_id: str, user_id: Optional[str] = None) -> list[MessageItem]:
    return ChatStore().list_messages(session_id, user_id)


def keywords_service(shop_id: Optional[str] = None) -> list[KeywordCount]:
    vehicle_ids = VehicleCatalog().vehicle_ids_for_shop(shop_id) if shop_id else None
    return top_keywords(ChatStore().list_user_messages(), mention_any=vehicle_ids)
