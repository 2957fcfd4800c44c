"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from pr_tracker.agents.gemini import AgentChunk
from pr_tracker.db import init_db, seed_movements
from pr_tracker.models.chat import ToolProposal
from pr_tracker.services.auth import AuthService
from pr_tracker.services.session_state import SessionState

PASSWORD = "secret123"


class FakeAgent:
    """Scripted stand-in for the Gemini chat session.

    Each queued reply is a list of AgentChunk items; an exception in the
    list is raised at that point of the stream.
    """

    def __init__(self):
        self.replies: list[list] = []
        self.sent: list[str] = []
        self.function_responses: list[tuple[str, dict]] = []

    def reply(self, *items) -> "FakeAgent":
        self.replies.append(list(items))
        return self

    @property
    def calls(self) -> int:
        return len(self.sent) + len(self.function_responses)

    async def _stream(self):
        items = self.replies.pop(0) if self.replies else [AgentChunk(text="OK")]
        for item in items:
            if isinstance(item, Exception):
                raise item
            yield item

    def send_message_stream(self, message: str):
        self.sent.append(message)
        return self._stream()

    def send_function_response(self, name: str, response: dict):
        self.function_responses.append((name, response))
        return self._stream()


def text(value: str) -> AgentChunk:
    return AgentChunk(text=value)


def call(name: str = "addPersonalRecord", **args) -> AgentChunk:
    return AgentChunk(function_calls=[ToolProposal(name=name, args=args)])


class StoreSpy:
    """Counts record store calls made through a SessionState."""

    def __init__(self, state: SessionState):
        self.calls: list[str] = []
        for repo_name in ("movement_repo", "record_repo", "score_repo"):
            repo = getattr(state, repo_name)
            for method in ("list_all", "create", "delete"):
                if hasattr(repo, method):
                    setattr(repo, method, self._wrap(f"{repo_name}.{method}", getattr(repo, method)))

    def _wrap(self, name, method):
        async def wrapper(*args, **kwargs):
            self.calls.append(name)
            return await method(*args, **kwargs)

        return wrapper

    def count(self, name: str) -> int:
        return self.calls.count(name)


async def create_user(db_path: Path, email: str, password: str = PASSWORD):
    """Sign up and confirm an account; returns the User."""
    auth = AuthService(db_path)
    _, token = await auth.sign_up(email, password)
    return await auth.confirm_email(token)


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest_asyncio.fixture
async def db_path(temp_db_path):
    """Initialized database with the starter movement catalog."""
    await init_db(temp_db_path)
    await seed_movements(temp_db_path)
    return temp_db_path


@pytest_asyncio.fixture
async def user(db_path):
    """A confirmed account."""
    return await create_user(db_path, "athlete@example.com")


@pytest_asyncio.fixture
async def other_user(db_path):
    return await create_user(db_path, "rival@example.com")


@pytest_asyncio.fixture
async def session_state(db_path, user):
    """Loaded session state for the confirmed account."""
    state = SessionState(user, db_path)
    await state.refresh()
    return state


@pytest.fixture
def fake_agent():
    return FakeAgent()
