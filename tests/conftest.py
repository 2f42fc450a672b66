"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Dict, Any

from review_gateway.logger import get_logger, reset_logger
from review_gateway.models import Entity


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response."""

    encoding = "utf-8"

    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self.text = text or (json.dumps(payload) if payload is not None else "")
        self.closed = False

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def iter_content(self, chunk_size: int = 1):
        body = self.text.encode("utf-8")
        for start in range(0, len(body), chunk_size):
            yield body[start:start + chunk_size]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


@pytest.fixture(autouse=True)
def quiet_logger():
    """Fresh, console-free global logger for every test."""
    reset_logger()
    get_logger(enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def philadelphia_pa() -> Dict[str, Any]:
    """Place entity with entity-reference properties."""
    return {
        "label": "Philadelphia Pa",
        "type": "place",
        "properties": {
            "state": {"type": "entity_ref", "code": "pennsylvania"},
            "country": {"type": "entity_ref", "code": "united_states"},
        },
    }


@pytest.fixture
def philadelphia() -> Dict[str, Any]:
    """Same city under a shorter label."""
    return {
        "label": "Philadelphia",
        "type": "place",
        "properties": {
            "state": {"type": "entity_ref", "code": "pennsylvania"},
            "country": {"type": "entity_ref", "code": "united_states"},
        },
    }


@pytest.fixture
def bare_person() -> Entity:
    """Entity without properties."""
    return Entity(label="Ada Lovelace", type="person")


@pytest.fixture
def valid_review_request(philadelphia_pa, philadelphia) -> Dict[str, Any]:
    """Structurally valid POST /review body."""
    return {"entity1": philadelphia_pa, "entity2": philadelphia, "similarity": 0.85}


@pytest.fixture
def completion_payload() -> Dict[str, Any]:
    """Provider response answering SAME."""
    return {
        "choices": [{"message": {"role": "assistant", "content": "SAME"}}],
        "usage": {"prompt_tokens": 412, "completion_tokens": 2, "total_tokens": 414},
    }


@pytest.fixture
def fake_response():
    """FakeResponse class, for building provider replies in tests."""
    return FakeResponse


@pytest.fixture
def sleeps(monkeypatch):
    """Capture backoff sleeps instead of waiting."""
    recorded = []
    monkeypatch.setattr("review_gateway.retry.time.sleep", recorded.append)
    return recorded


@pytest.fixture
def request_file(tmp_path, valid_review_request) -> Path:
    """Review request written to disk for the CLI."""
    path = tmp_path / "pair.json"
    path.write_text(json.dumps(valid_review_request))
    return path
