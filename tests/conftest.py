import os

# Point the app engine at SQLite before anything imports workflow_composer.database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from workflow_composer.database import Base
from workflow_composer.models import workflow as workflow_models  # noqa: F401
from workflow_composer.models import execution as execution_models  # noqa: F401
from tests.helpers import RecordingNotifier

@pytest.fixture
def valid_document():
    return {
        "name": "Customer Support Auto-Responder",
        "nodes": [
            {
                "id": "trigger-1",
                "name": "Support Webhook",
                "type": "n8n-nodes-base.webhook",
                "typeVersion": 1,
                "position": [240, 300],
                "parameters": {"path": "support", "httpMethod": "POST"},
            },
            {
                "id": "http-1",
                "name": "Send Reply",
                "type": "n8n-nodes-base.httpRequest",
                "typeVersion": 4,
                "position": [460, 300],
                "parameters": {"url": "https://api.example.com/reply", "method": "POST"},
            },
        ],
        "connections": {
            "Support Webhook": {"main": [[{"node": "Send Reply", "type": "main", "index": 0}]]}
        },
        "active": False,
        "settings": {"executionOrder": "v1"},
    }

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)

@pytest.fixture
def notifier():
    return RecordingNotifier()
