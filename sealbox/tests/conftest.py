import pytest
from fastapi.testclient import TestClient

from sealbox.app.main import create_app

TEST_SECRET = "mysecret"


@pytest.fixture
def app_env(monkeypatch):
    """
    Minimal valid environment for the application lifespan.
    """
    monkeypatch.setenv("SEALBOX_HMAC_SECRET", TEST_SECRET)
    monkeypatch.delenv("SEALBOX_HMAC_ALGORITHM", raising=False)
    monkeypatch.delenv("SEALBOX_CODEC", raising=False)
    monkeypatch.delenv("SEALBOX_LOG_LEVEL", raising=False)


@pytest.fixture
def client(app_env):
    with TestClient(create_app()) as test_client:
        yield test_client
