import httpx
import pytest
from httpx import ASGITransport

_ENV_VARS = (
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_FROM_NUMBER",
    "TWILIO_VOICE_URL",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # Keep a developer's .env out of the test run
    monkeypatch.chdir(tmp_path)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_env(monkeypatch, clean_env):
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "test-token")
    monkeypatch.setenv("TWILIO_FROM_NUMBER", "+15550000000")
    monkeypatch.setenv("TWILIO_VOICE_URL", "https://example.com/voice.xml")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")


async def _serve():
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c


@pytest.fixture
async def client(mock_env):
    async for c in _serve():
        yield c


@pytest.fixture
async def unconfigured_client(clean_env):
    async for c in _serve():
        yield c
