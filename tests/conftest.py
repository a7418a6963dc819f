import io
from datetime import datetime, timezone

import pytest

from jsonlogfmt.config import ENV_VARS, Config, FieldMapping


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep JSONLOGFMT_* variables from the outer shell out of the tests."""
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def mapping():
    return FieldMapping()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def ts():
    return datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_stream():
    """Build a binary stream the way stdin would deliver it."""
    def _make(text: str):
        return io.BytesIO(text.encode("utf-8"))
    return _make
