import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

from fastapi import FastAPI

import showroom_chat.config.config as configs
from showroom_chat.api.v1.route import api_router as MainRouter
from showroom_chat.db import models  # noqa: F401
from showroom_chat.db.seeds.chat_questions import seed_chat_questions
from showroom_chat.db.session import Base, engine
from showroom_chat.service.chat.chat import close_orchestrator

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=configs.LOG_LEVEL,
)
logger = logging.getLogger(__name__)

app = FastAPI(title="showroom_chat", version="0.0.1")
app.include_router(router=MainRouter, prefix="/api/v1")


@app.on_event("startup")
def create_tables() -> None:
    Base.metadata.create_all(bind=engine)
    added = seed_chat_questions()
    if added:
        logger.info("seeded %s follow-up prompts", added)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await close_orchestrator()
