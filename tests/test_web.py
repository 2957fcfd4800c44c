"""Tests for the FastAPI web interface."""

import asyncio
import json

import pytest
from conftest import PASSWORD, FakeAgent, call, create_user, text
from fastapi.testclient import TestClient

from pr_tracker.config import Settings
from pr_tracker.models.user import AuthEvent, AuthSession
from pr_tracker.services.session_state import SessionState
from pr_tracker.web import create_app
from pr_tracker.web.routers.chat import NOTHING_PENDING
from pr_tracker.web.sessions import SessionRegistry

EMAIL = "athlete@example.com"


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def agent():
    return FakeAgent()


@pytest.fixture
def app(settings, agent):
    return create_app(settings, agent_factory=lambda instruction: agent)


@pytest.fixture
def client(app, settings):
    """Client with the lifespan run and one confirmed account."""
    with TestClient(app) as client:
        asyncio.run(create_user(settings.db_path, EMAIL))
        yield client


@pytest.fixture
def signed_in(client):
    response = client.post("/auth/login", data={"email": EMAIL, "password": PASSWORD})
    assert response.status_code == 200
    return client


def movement_id(client, name: str) -> int:
    for movement in client.get("/movements").json()["movements"]:
        if movement["name"] == name:
            return movement["id"]
    raise AssertionError(f"{name} not in catalog")


def _record_id(client, value: str) -> int:
    [session] = client.app.state.sessions._sessions.values()
    for record in session.state.records:
        if record.value == value:
            return record.id
    raise AssertionError(value)


def add_pr(client, name: str, value: str, date: str = "2026-10-19", notes: str = ""):
    return client.post(
        "/prs",
        data={"movement_id": movement_id(client, name), "value": value, "date": date, "notes": notes},
    )


def sse_events(response) -> list[dict]:
    return [
        json.loads(line[len("data: "):])
        for line in response.text.splitlines()
        if line.startswith("data: ")
    ]


class TestAuth:
    """Tests for sign-in and route protection."""

    def test_protected_page_redirects_to_login(self, client):
        response = client.get("/prs", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/auth/login"

    def test_login_page(self, client):
        response = client.get("/auth/login")

        assert response.status_code == 200
        assert "Sign In" in response.text

    def test_bad_credentials(self, client):
        response = client.post("/auth/login", data={"email": EMAIL, "password": "nope-nope"})

        assert response.status_code == 200
        assert "Invalid login credentials" in response.text

    def test_sign_in_lands_on_records(self, signed_in):
        response = signed_in.get("/prs")

        assert "My PRs" in response.text
        assert "No PRs logged yet" in response.text

    def test_signed_in_user_skips_login_page(self, signed_in):
        response = signed_in.get("/auth/login", follow_redirects=False)
        assert response.headers["location"] == "/prs"

    def test_sign_up_asks_for_confirmation(self, client):
        response = client.post(
            "/auth/signup", data={"email": "new@example.com", "password": "secret123"}
        )

        assert "Check your email for the confirmation link!" in response.text

        response = client.post("/auth/login", data={"email": "new@example.com", "password": "secret123"})
        assert "Email not confirmed" in response.text

    def test_bad_confirmation_token(self, client):
        response = client.get("/auth/confirm", params={"token": "not-a-token"})
        assert "banner error" in response.text

    def test_logout_drops_session_state(self, app, signed_in):
        """Test signing out forgets the cached per-user state."""
        assert len(app.state.sessions) == 1

        response = signed_in.post("/auth/logout", follow_redirects=False)

        assert response.headers["location"] == "/auth/login"
        assert len(app.state.sessions) == 0
        assert signed_in.get("/prs", follow_redirects=False).status_code == 302


class TestRecords:
    """Tests for the PR list, add form, history and delete."""

    def test_add_and_list(self, signed_in):
        response = add_pr(signed_in, "Back Squat", "150kg")

        assert response.status_code == 200
        assert "Back Squat" in response.text
        assert "150kg" in response.text
        assert "October 19, 2026" in response.text

    def test_add_requires_fields(self, signed_in):
        response = signed_in.post("/prs", data={"movement_id": "", "value": "", "date": "2026-10-19"})

        assert "Please fill in all required fields." in response.text
        assert "Add a New PR" in response.text

    def test_latest_and_search(self, signed_in):
        add_pr(signed_in, "Back Squat", "140kg", date="2026-09-01")
        add_pr(signed_in, "Back Squat", "150kg", date="2026-10-19")
        add_pr(signed_in, "Deadlift", "200kg")

        page = signed_in.get("/prs").text
        assert "150kg" in page
        assert "140kg" not in page

        page = signed_in.get("/prs", params={"search": "dead"}).text
        assert "200kg" in page
        assert "150kg" not in page

    def test_history_and_delete(self, signed_in):
        squat = movement_id(signed_in, "Back Squat")
        add_pr(signed_in, "Back Squat", "140kg", date="2026-09-01")
        add_pr(signed_in, "Back Squat", "150kg", date="2026-10-19")

        page = signed_in.get(f"/prs/history/{squat}").text
        assert page.index("150kg") < page.index("140kg")

        record_id = _record_id(signed_in, "150kg")
        response = signed_in.post(
            f"/prs/{record_id}/delete", data={"movement_id": squat}, follow_redirects=False
        )

        assert response.headers["location"] == f"/prs/history/{squat}"
        page = signed_in.get(f"/prs/history/{squat}").text
        assert "150kg" not in page
        assert "140kg" in page

    def test_unknown_history_redirects(self, signed_in):
        response = signed_in.get("/prs/history/99999", follow_redirects=False)
        assert response.headers["location"] == "/prs"

    def test_add_movement_preselects_it(self, signed_in):
        response = signed_in.post(
            "/movements", data={"name": "Zercher Squat", "category": "Weightlifting"}
        )

        assert "Zercher Squat" in response.text
        assert "selected>Zercher Squat" in response.text

    def test_error_banner_can_be_dismissed(self, app, signed_in):
        [session] = app.state.sessions._sessions.values()
        session.state.error = "Could not fetch data: boom"

        assert "Could not fetch data: boom" in signed_in.get("/prs").text

        response = signed_in.post(
            "/dismiss-error", headers={"referer": "http://testserver/wods"}, follow_redirects=False
        )

        assert response.headers["location"] == "/wods"
        assert "Could not fetch data" not in signed_in.get("/prs").text


class TestWods:
    """Tests for the benchmark WOD pages."""

    def test_catalog(self, signed_in):
        page = signed_in.get("/wods").text

        assert "Fran" in page
        assert "The Filthy 50" in page

    def test_log_score(self, signed_in):
        response = signed_in.post(
            "/wods/fran/scores", data={"score": "3:45", "date": "2026-10-01", "notes": "Rx"}
        )

        assert response.status_code == 200
        assert "3:45" in response.text
        assert "October 1, 2026" in response.text

    def test_score_requires_fields(self, signed_in):
        response = signed_in.post("/wods/fran/scores", data={"score": "", "date": "2026-10-01"})
        assert "Score and Date are required." in response.text

    def test_unknown_wod_redirects(self, signed_in):
        response = signed_in.get("/wods/nancy", follow_redirects=False)
        assert response.headers["location"] == "/wods"


class TestCalculator:
    """Tests for the percentage calculator page."""

    def test_needs_weight_based_record(self, signed_in):
        add_pr(signed_in, "Back Squat", "5:30")

        assert "Log a weight-based PR" in signed_in.get("/calculator").text

    def test_percentage_and_table(self, signed_in):
        add_pr(signed_in, "Back Squat", "150kg")

        page = signed_in.get("/calculator", params={"percentage": "80"}).text

        assert "120.00 kg" in page
        assert "75.00 kg" in page

    def test_invalid_percentage(self, signed_in):
        add_pr(signed_in, "Back Squat", "150kg")

        page = signed_in.get("/calculator", params={"percentage": "abc"}).text

        assert "is not a valid percentage" in page


class TestChat:
    """Tests for the coaching assistant endpoints."""

    def test_propose_then_confirm(self, signed_in, agent):
        """Test a proposal is only written after the confirm call."""
        agent.reply(text("Sure! "), call(movementName="Back Squat", value="150kg"))
        agent.reply(text("Congrats on the PR!"))

        events = sse_events(signed_in.post("/chat/send", data={"message": "log squat 150kg"}))

        assert [e["type"] for e in events] == ["chunk", "confirmation", "done"]
        assert events[1]["tool_call"]["args"]["movementName"] == "Back Squat"
        assert events[-1]["state"] == "AwaitingConfirmation"
        assert "No PRs logged yet" in signed_in.get("/prs").text

        state = signed_in.post("/chat/confirm").json()

        assert state["state"] == "Idle"
        assert state["messages"][-1]["text"] == "Congrats on the PR!"
        assert "150kg" in signed_in.get("/prs").text

    def test_cancel(self, signed_in, agent):
        agent.reply(call(movementName="Back Squat", value="150kg"))
        signed_in.post("/chat/send", data={"message": "log squat"})

        state = signed_in.post("/chat/cancel").json()

        assert state["state"] == "Idle"
        assert state["messages"][-1]["text"] == "Okay, I've cancelled the request."
        assert all(m["pending"] is None for m in state["messages"])

    def test_resolve_without_proposal(self, signed_in):
        response = signed_in.post("/chat/confirm")

        assert response.status_code == 409
        assert response.json()["error"] == NOTHING_PENDING

    def test_stream_error_event(self, signed_in, agent):
        agent.reply(RuntimeError("network down"))

        events = sse_events(signed_in.post("/chat/send", data={"message": "hi"}))

        assert [e["type"] for e in events] == ["error", "done"]
        assert events[-1]["state"] == "Idle"

    def test_chat_page_shows_pending_buttons(self, signed_in, agent):
        agent.reply(call(movementName="Back Squat", value="150kg"))
        signed_in.post("/chat/send", data={"message": "log squat"})

        page = signed_in.get("/chat").text

        assert 'data-resolve="confirm"' in page
        assert "Shall I proceed?" in page

    def test_state_endpoint(self, signed_in, agent):
        agent.reply(text("Sure!"), call(movementName="Back Squat", value="150kg"))
        signed_in.post("/chat/send", data={"message": "log squat"})

        state = signed_in.get("/chat/state").json()

        assert state["state"] == "AwaitingConfirmation"
        assert state["available"] is True
        assert state["busy"] is False
        last = state["messages"][-1]
        assert last["text"] == "Sure!"
        assert last["pending"]["args"]["value"] == "150kg"
        assert "Shall I proceed?" in last["pending"]["prompt"]

    def test_prompt_removed_after_cancel(self, signed_in, agent):
        """Test a resolved proposal leaves no prompt or buttons in the history."""
        agent.reply(text("Sure!"), call(movementName="Back Squat", value="150kg"))
        signed_in.post("/chat/send", data={"message": "log squat"})
        signed_in.post("/chat/cancel")

        page = signed_in.get("/chat").text

        assert "Sure!" in page
        assert "Shall I proceed?" not in page
        assert 'data-resolve="confirm"' not in page

    def test_chat_disabled_without_credential(self, tmp_path):
        settings = Settings(data_dir=tmp_path / "data", gemini_api_key=None)
        with TestClient(create_app(settings)) as client:
            asyncio.run(create_user(settings.db_path, EMAIL))
            client.post("/auth/login", data={"email": EMAIL, "password": PASSWORD})

            assert 'href="/chat"' not in client.get("/prs").text
            assert "The AI assistant is not configured." in client.get("/chat").text
            assert client.get("/health").json()["ai_enabled"] is False


class TestHealth:
    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["ai_enabled"] is True


class TestSessionRegistry:
    """Tests for per-token session caching."""

    @pytest.mark.asyncio
    async def test_concurrent_first_requests_share_one_session(self, db_path, user):
        registry = SessionRegistry(db_path)
        auth = AuthSession(token="athlete", user=user)

        first, second = await asyncio.gather(registry.get(auth), registry.get(auth))

        assert first is second
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_slow_load_does_not_block_other_sessions(self, db_path, user, other_user, monkeypatch):
        """Test a session still loading does not hold up requests for another one."""
        registry = SessionRegistry(db_path)
        rival = await registry.get(AuthSession(token="rival", user=other_user))

        release = asyncio.Event()
        refresh = SessionState.refresh

        async def slow_refresh(state):
            await release.wait()
            return await refresh(state)

        monkeypatch.setattr(SessionState, "refresh", slow_refresh)
        loading = asyncio.create_task(registry.get(AuthSession(token="athlete", user=user)))
        await asyncio.sleep(0)

        again = await asyncio.wait_for(registry.get(AuthSession(token="rival", user=other_user)), timeout=1)

        assert again is rival
        assert "athlete" not in registry

        release.set()
        session = await loading

        assert session.user.email == user.email
        assert session.state.loaded
        assert "athlete" in registry

    @pytest.mark.asyncio
    async def test_sign_out_drops_session(self, db_path, user):
        registry = SessionRegistry(db_path)
        auth = AuthSession(token="athlete", user=user)
        await registry.get(auth)

        await registry.on_auth_state_change(AuthEvent.SIGNED_OUT, auth)

        assert "athlete" not in registry
