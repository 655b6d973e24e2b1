"""Gemini gateway built on the google-genai SDK.

Owns the single client used for the Files API (image relay) and for chat
sessions. Generation settings are fixed for every request.
"""

import os
from dataclasses import dataclass

import structlog
from google import genai
from google.genai import types

from askai.core.errors import InvocationError, RelayError
from askai.core.models import ModelHandle

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """Provider-assigned reference to an uploaded asset."""
    uri: str
    mime_type: str


GENERATION_CONFIG = types.GenerateContentConfig(
    temperature=1.0,
    top_p=0.95,
    top_k=64,
    max_output_tokens=512,
    response_mime_type="text/plain",
)


class GeminiGateway:
    """Wraps a google-genai client for file upload and chat completion."""

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else os.environ.get("GOOGLE_API_KEY", "")
        self.timeout = int(os.environ.get("GEMINI_TIMEOUT", "60"))

        # HttpOptions.timeout is in milliseconds
        self.client = genai.Client(
            api_key=self.api_key,
            http_options=types.HttpOptions(timeout=self.timeout * 1000),
        )

    def is_healthy(self) -> bool:
        """Check if an API key is configured.

        Returns:
            True if GOOGLE_API_KEY (or an explicit key) is set.
        """
        return bool(self.api_key)

    def upload_file(self, path: str, mime_type: str, display_name: str) -> UploadedFile:
        """Upload a local file to the Gemini Files API.

        Args:
            path: Local path of the file to upload.
            mime_type: MIME type declared by the client.
            display_name: Name shown for the file on the provider side.

        Returns:
            UploadedFile with the provider URI and MIME type.

        Raises:
            RelayError: If the upload fails.
        """
        logger.debug("gemini.upload", mime_type=mime_type, display_name=display_name)

        try:
            uploaded = self.client.files.upload(
                file=path,
                config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
            )
        except Exception as e:
            logger.error("gemini.upload_failed", error=str(e))
            raise RelayError(f"Gemini file upload failed: {e}") from e

        logger.info("gemini.upload_ok", uri=uploaded.uri)
        return UploadedFile(uri=uploaded.uri, mime_type=uploaded.mime_type or mime_type)

    def ask(self, handle: ModelHandle, history: list[types.Content], question: str) -> str:
        """Start a chat session with the given history and send the question.

        Args:
            handle: Model to chat with.
            history: Conversation turns to seed the session with.
            question: Message that triggers the reply.

        Returns:
            Raw response text (not trimmed).

        Raises:
            InvocationError: If the chat call fails or returns no text.
        """
        logger.debug("gemini.chat", model=handle.model, turns=len(history))

        try:
            chat = self.client.chats.create(
                model=handle.model,
                config=GENERATION_CONFIG,
                history=history,
            )
            response = chat.send_message(question)
            text = response.text
        except Exception as e:
            logger.error("gemini.chat_failed", model=handle.model, error=str(e))
            raise InvocationError(f"Gemini chat failed: {e}") from e

        if not text:
            # Usually a safety block; prompt_feedback carries the reason
            feedback = getattr(response, "prompt_feedback", None)
            reason = getattr(feedback, "block_reason", None) if feedback else None
            logger.warning("gemini.empty_response", model=handle.model, block_reason=str(reason))
            raise InvocationError("Gemini returned an empty response.")

        return text
