"""Pytest configuration and fixtures for whoop-cli tests."""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from whoop_cli.adapters.whoop_adapter import WhoopAdapter
from whoop_cli.core.config import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"

TEST_BASE_URL = "https://api.whoop.test"
LOGIN_PATH = "/auth-service/v3/whoop"

ENDPOINT_FIXTURES = {
    "/home-service/v1/home": "home.json",
    "/home-service/v1/deep-dive/sleep": "sleep.json",
    "/home-service/v1/deep-dive/sleep/last-night": "sleep_last_night.json",
    "/home-service/v1/deep-dive/strain": "strain.json",
    "/healthspan-service/v1/healthspan/bff": "healthspan.json",
}


def load_fixture(name: str) -> Any:
    """Load a JSON fixture from tests/fixtures."""
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


# -------------------------------------------------------------------------
# Fake WHOOP backend
# -------------------------------------------------------------------------


class FakeWhoopServer:
    """In-memory stand-in for the WHOOP API, served through httpx.MockTransport.

    Logins hand out ``token-1``, ``token-2``, ... Queued responses for a path
    (or for login) are returned before falling back to the default payload.
    """

    def __init__(self, payloads: Optional[dict[str, Any]] = None):
        self.payloads = payloads or {}
        self.login_calls = 0
        self.login_bodies: list[dict] = []
        self.data_requests: list[httpx.Request] = []
        self.queued_logins: list[httpx.Response] = []
        self.queued: dict[str, list[httpx.Response]] = {}
        self.expires_in = 86400

    def queue(self, path: str, *responses: httpx.Response) -> None:
        self.queued.setdefault(path, []).extend(responses)

    def queue_login(self, *responses: httpx.Response) -> None:
        self.queued_logins.extend(responses)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        # Yield so concurrent callers interleave as they would over a network
        await asyncio.sleep(0)

        if request.url.path == LOGIN_PATH:
            self.login_calls += 1
            self.login_bodies.append(json.loads(request.content))
            if self.queued_logins:
                return self.queued_logins.pop(0)
            return httpx.Response(
                200,
                json={
                    "AuthenticationResult": {
                        "AccessToken": f"token-{self.login_calls}",
                        "ExpiresIn": self.expires_in,
                    }
                },
            )

        self.data_requests.append(request)
        queued = self.queued.get(request.url.path)
        if queued:
            return queued.pop(0)
        if request.url.path in self.payloads:
            return httpx.Response(200, json=self.payloads[request.url.path])
        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# -------------------------------------------------------------------------
# Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        whoop_email="athlete@example.com",
        whoop_password="hunter2",
        whoop_api_base_url=TEST_BASE_URL,
        whoop_client_id="test-client-id",
        whoop_time_zone="UTC",
    )


@pytest.fixture
def whoop_payloads() -> dict[str, Any]:
    """The five endpoint payloads for 2024-01-15."""
    return {path: load_fixture(name) for path, name in ENDPOINT_FIXTURES.items()}


@pytest.fixture
def expected_daily_stats() -> dict:
    return load_fixture("daily_stats_2024-01-15.json")


@pytest.fixture
def fake_server(whoop_payloads) -> FakeWhoopServer:
    return FakeWhoopServer(whoop_payloads)


@pytest.fixture
async def whoop_client(settings: Settings, fake_server: FakeWhoopServer):
    """Adapter wired to the fake server."""
    client = WhoopAdapter(
        "athlete@example.com",
        "hunter2",
        settings=settings,
        transport=fake_server.transport,
    )
    yield client
    await client.close()
