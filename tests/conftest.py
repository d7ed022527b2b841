import os
import tempfile
from pathlib import Path

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="showroom-chat-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ.setdefault("SESSION_LOCK_BACKEND", "memory")

from fastapi.testclient import TestClient

from showroom_chat.db import models  # noqa: F401
from showroom_chat.db.session import Base, engine
from showroom_chat.main import app


#scope : function < class < module < package < session
@pytest.fixture(scope="function")
def client():
    return TestClient(app)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
