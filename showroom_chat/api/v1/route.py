import logging
from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from showroom_chat.model.chat.chat_request import ChatRequest, ResetRequest
from showroom_chat.model.chat.chat_response import ChatResponse, ErrorResponse, ResetResponse
from showroom_chat.model.chat.session_response import KeywordCount, MessageItem, SessionSummary
from showroom_chat.service.chat.chat import (
    chat_service,
    keywords_service,
    messages_service,
    reset_service,
    sessions_service,
)
from showroom_chat.service.chat.errors import ChatError, ChatValidationError, GatewayError, SessionBusyError

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/chat")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def _error(status_code: int, summary: str, details: Optional[str]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=summary, details=details).model_dump())


def _chat_error_status(exc: ChatError) -> int:
    if isinstance(exc, ChatValidationError):
        return 400
    if isinstance(exc, SessionBusyError):
        return 409
    if isinstance(exc, GatewayError):
        return 502
    return 500


@api_router.post("/send", response_model=ChatResponse, responses=ERROR_RESPONSES)
async def send_message(req: ChatRequest):
    try:
        return await chat_service(req)
    except ChatError as e:
        logger.warning("chat turn failed session_id=%s reason=%s", req.session_id, e.detail)
        return _error(_chat_error_status(e), e.summary, e.detail)
    except Exception as e:
        logger.exception("unexpected chat failure session_id=%s", req.session_id)
        return _error(500, ChatError.summary, str(e))


@api_router.post("/reset", response_model=ResetResponse, responses=ERROR_RESPONSES)
async def reset_conversation(req: ResetRequest):
    try:
        await reset_service(req.session_id)
    except ChatError as e:
        return _error(_chat_error_status(e), "Error resetting conversation", e.detail)
    except Exception as e:
        logger.exception("unexpected reset failure session_id=%s", req.session_id)
        return _error(500, "Error resetting conversation", str(e))
    return ResetResponse(message="Conversation reset")


@api_router.get("/sessions", response_model=List[SessionSummary])
def list_sessions(user_id: Optional[str] = None):
    return sessions_service(user_id)


@api_router.get("/session/{session_id}/messages", response_model=List[MessageItem])
def list_session_messages(session_id: str, user_id: Optional[str] = None):
    return messages_service(session_id, user_id)


@api_router.get("/keywords", response_model=List[KeywordCount])
def list_keywords(shop_id: Optional[str] = None):
    return keywords_service(shop_id)
