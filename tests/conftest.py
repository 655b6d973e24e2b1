"""Shared fixtures for all tests."""

import os

import pytest
from fastapi.testclient import TestClient

from askai.core.gemini_client import UploadedFile
from askai.main import app


class FakeGateway:
    """Records upload and chat calls instead of talking to Gemini."""

    def __init__(self, reply: str = "  4  ", chat_error: Exception | None = None,
                 upload_error: Exception | None = None):
        self.reply = reply
        self.chat_error = chat_error
        self.upload_error = upload_error
        self.uploads = []
        self.asks = []

    def is_healthy(self) -> bool:
        return True

    def upload_file(self, path, mime_type, display_name):
        with open(path, "rb") as f:
            data = f.read()
        self.uploads.append({
            "path": path,
            "existed": os.path.exists(path),
            "data": data,
            "mime_type": mime_type,
            "display_name": display_name,
        })
        if self.upload_error is not None:
            raise self.upload_error
        return UploadedFile(uri="https://files.example/abc123", mime_type=mime_type)

    def ask(self, handle, history, question):
        self.asks.append({"handle": handle, "history": history, "question": question})
        if self.chat_error is not None:
            raise self.chat_error
        return self.reply


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(fake_gateway):
    """TestClient with the fake gateway installed (lifespan is not run)."""
    app.state.gemini = fake_gateway
    yield TestClient(app)
    app.state.gemini = None


@pytest.fixture
def sample_png() -> bytes:
    # 1x1 transparent PNG
    return (
        b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
        b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
        b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
    )
