"""
Failures raised by the chat services.

Route handlers translate these into `{"error", "details"}` bodies; parse
degradations and photo lookup misses never show up here.
"""

from typing import Optional


class ChatError(Exception):
    summary = "Error processing message"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ChatValidationError(ChatError):
    """Rejected locally before any remote call is made."""

    summary = "Invalid chat request"


class SessionBusyError(ChatError):
    summary = "Another message is still being processed for this session"


class GatewayError(ChatError):
    """
    A step of the assistant thread protocol failed.

    `step` names the protocol step (create_thread, post_message, start_run,
    poll_run, fetch_messages, delete_thread) and `body` keeps the raw
    response text for diagnostics.
    """

    summary = "Assistant service error"

    def __init__(
        self,
        step: str,
        detail: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.step = step
        self.status_code = status_code
        self.body = body
        message = f"{step} failed: {detail}"
        if status_code is not None:
            message += f" (status={status_code})"
        if body:
            message += f" body={body}"
        super().__init__(message)
