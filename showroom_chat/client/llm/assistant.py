"""
Client for the assistant threads API, built on the openai SDK.

One chat turn is: post the visitor's message to the thread, start a run,
poll the run until it reaches a terminal status, then list the thread's
messages and read the newest assistant message. The message list is read
as a raw response so the untouched body is kept for the reply parser.

Every SDK failure is re-raised as a GatewayError tagged with the step
that failed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

import httpx
from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI

import showroom_chat.config.config as configs
from showroom_chat.service.chat.errors import GatewayError

logger = logging.getLogger(__name__)

TERMINAL_FAILURES = {"failed", "cancelled", "expired"}
RUN_COMPLETED = "completed"


@dataclass
class ThreadMessage:
    role: str
    text: Optional[str]


@dataclass
class MessageList:
    """Thread messages, most recent first, plus the raw response body."""

    messages: list[ThreadMessage] = field(default_factory=list)
    raw: str = ""

    def latest_assistant_text(self) -> Optional[str]:
        for message in self.messages:
            if message.role == "assistant":
                return message.text
        return None


def _message_text(item: dict[str, Any]) -> Optional[str]:
    content = item.get("content")
    if not isinstance(content, list):
        return None
    parts: list[str] = []
    for block in content:
        if not isinstance(block, dict) or block.get("type", "text") != "text":
            continue
        text = block.get("text")
        value = text.get("value") if isinstance(text, dict) else text
        if isinstance(value, str):
            parts.append(value)
    return "\n".join(parts) if parts else None


def parse_message_list(raw: str, payload: Any) -> MessageList:
    listing = MessageList(raw=raw)
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        return listing
    for item in data:
        if not isinstance(item, dict):
            continue
        listing.messages.append(ThreadMessage(role=str(item.get("role", "")), text=_message_text(item)))
    return listing


class ThreadGateway:
    def __init__(
        self,
        api_key: Optional[str] = None,
        assistant_id: Optional[str] = None,
        base_url: Optional[str] = None,
        beta_header: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_poll_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.assistant_id = assistant_id if assistant_id is not None else configs.OPENAI_ASSISTANT_ID
        self.poll_interval = configs.RUN_POLL_INTERVAL_SEC if poll_interval is None else poll_interval
        self.max_poll_seconds = configs.RUN_POLL_MAX_WAIT_SEC if max_poll_seconds is None else max_poll_seconds
        self._client = AsyncOpenAI(
            api_key=api_key if api_key is not None else configs.OPENAI_API_KEY,
            base_url=base_url or configs.OPENAI_BASE_URL,
            default_headers={"OpenAI-Beta": beta_header or configs.OPENAI_BETA_HEADER},
            timeout=configs.ASSISTANT_HTTP_TIMEOUT_SEC,
            max_retries=configs.ASSISTANT_MAX_RETRIES,
            http_client=http_client,
        )
        self._threads = self._client.beta.threads
        self._sleep = sleep

    async def aclose(self) -> None:
        await self._client.close()

    @staticmethod
    async def _call(step: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except APIStatusError as exc:
            raise GatewayError(step, exc.message, status_code=exc.status_code, body=exc.response.text) from exc
        except APIConnectionError as exc:
            raise GatewayError(step, f"request error: {exc}") from exc
        except APIError as exc:
            raise GatewayError(step, exc.message, body=None if exc.body is None else str(exc.body)) from exc

    @staticmethod
    def _required_str(step: str, obj: Any, attr: str) -> str:
        # Malformed bodies come back unvalidated, so the field may be missing or the object a plain str
        value = getattr(obj, attr, None)
        if not isinstance(value, str) or not value:
            raise GatewayError(step, f"missing '{attr}'", body=str(obj))
        return value

    async def create_thread(self) -> str:
        thread = await self._call("create_thread", self._threads.create())
        thread_id = self._required_str("create_thread", thread, "id")
        logger.info("assistant thread created thread_id=%s", thread_id)
        return thread_id

    async def post_user_turn(self, thread_id: str, text: str) -> None:
        if not thread_id:
            raise GatewayError("post_message", "empty thread id")
        await self._call(
            "post_message",
            self._threads.messages.create(thread_id, role="user", content=text),
        )

    async def start_run(self, thread_id: str) -> str:
        run = await self._call(
            "start_run",
            self._threads.runs.create(thread_id=thread_id, assistant_id=self.assistant_id),
        )
        return self._required_str("start_run", run, "id")

    async def _poll_until_terminal(self, thread_id: str, run_id: str) -> str:
        while True:
            run = await self._call("poll_run", self._threads.runs.retrieve(run_id, thread_id=thread_id))
            status = self._required_str("poll_run", run, "status")
            logger.debug("run status thread_id=%s run_id=%s status=%s", thread_id, run_id, status)
            if status == RUN_COMPLETED:
                return status
            if status in TERMINAL_FAILURES:
                last_error = getattr(run, "last_error", None)
                raise GatewayError(
                    "poll_run",
                    f"run ended with status {status}",
                    body=None if last_error is None else str(last_error),
                )
            await self._sleep(self.poll_interval)

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        await self._call("cancel_run", self._threads.runs.cancel(run_id, thread_id=thread_id))
        logger.info("run cancelled thread_id=%s run_id=%s", thread_id, run_id)

    async def poll_run(self, thread_id: str, run_id: str) -> str:
        try:
            status = await asyncio.wait_for(
                self._poll_until_terminal(thread_id, run_id),
                timeout=self.max_poll_seconds,
            )
        except asyncio.TimeoutError as exc:
            # An abandoned active run keeps the thread locked for the next turn
            try:
                await self.cancel_run(thread_id, run_id)
            except GatewayError as cancel_exc:
                logger.warning("could not cancel timed out run: %s", cancel_exc)
            raise GatewayError("poll_run", f"run not finished after {self.max_poll_seconds}s") from exc
        logger.info("run completed thread_id=%s run_id=%s", thread_id, run_id)
        return status

    async def fetch_messages(self, thread_id: str) -> MessageList:
        response = await self._call(
            "fetch_messages",
            self._threads.messages.with_raw_response.list(thread_id=thread_id),
        )
        raw = response.text
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("message list is not json thread_id=%s", thread_id)
            return MessageList(raw=raw)
        return parse_message_list(raw, payload)

    async def delete_thread(self, thread_id: str) -> None:
        await self._call("delete_thread", self._threads.delete(thread_id))
        logger.info("assistant thread deleted thread_id=%s", thread_id)
