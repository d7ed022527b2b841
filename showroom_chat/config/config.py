import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[2] / ".env")


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_ASSISTANT_ID = os.getenv("OPENAI_ASSISTANT_ID", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
# The threads API is still a beta surface and rejects calls without this header
OPENAI_BETA_HEADER = os.getenv("OPENAI_BETA_HEADER", "assistants=v2")

ASSISTANT_HTTP_TIMEOUT_SEC = float(os.getenv("ASSISTANT_HTTP_TIMEOUT_SEC", "30"))
# A failed remote call is surfaced to the visitor, never replayed by the client
ASSISTANT_MAX_RETRIES = int(os.getenv("ASSISTANT_MAX_RETRIES", "0"))
RUN_POLL_INTERVAL_SEC = float(os.getenv("RUN_POLL_INTERVAL_SEC", "1.0"))
RUN_POLL_MAX_WAIT_SEC = float(os.getenv("RUN_POLL_MAX_WAIT_SEC", "120"))

NEUTRAL_MOOD = os.getenv("NEUTRAL_MOOD", "neutral")
FALLBACK_REPLY_MESSAGE = os.getenv("FALLBACK_REPLY_MESSAGE", "Sorry, I could not process the reply.")
FOLLOW_UP_PROMPT_COUNT = int(os.getenv("FOLLOW_UP_PROMPT_COUNT", "3"))

# memory | redis
SESSION_LOCK_BACKEND = os.getenv("SESSION_LOCK_BACKEND", "memory")
SESSION_LOCK_TTL_SEC = int(os.getenv("SESSION_LOCK_TTL_SEC", "300"))
SESSION_LOCK_WAIT_SEC = float(os.getenv("SESSION_LOCK_WAIT_SEC", "150"))
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
