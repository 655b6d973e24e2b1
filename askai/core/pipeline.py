"""Stages of the ask pipeline: parse -> validate -> relay -> build history.

Each stage raises its own error type from askai.core.errors; the route
boundary turns them into HTTP responses.
"""

import os
import tempfile
from dataclasses import dataclass

import structlog
from google.genai import types
from starlette.datastructures import UploadFile
from starlette.requests import Request

from askai.core.errors import ParseError, RelayError, ValidationError
from askai.core.gemini_client import GeminiGateway, UploadedFile
from askai.core.models import ModelHandle, get_model

logger = structlog.get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_FILENAME = "image"


@dataclass
class ImageUpload:
    """An image part held in memory."""
    data: bytes
    filename: str
    mime_type: str


@dataclass
class IncomingQuestion:
    """Decoded form fields of one ask request."""
    question: str | None
    model_name: str | None
    image: ImageUpload | None = None


async def parse_request(request: Request) -> IncomingQuestion:
    """Decode the form body into an IncomingQuestion.

    Non-string values for the text fields count as absent. A file part with
    no filename and no bytes (an empty browser file input) counts as no image.

    Raises:
        ParseError: If the body cannot be decoded.
    """
    try:
        form = await request.form()
        question = _text_field(form.get("question"))
        model_name = _text_field(form.get("model"))
        image = await _read_image(form.get("image"))
    except Exception as e:
        raise ParseError(f"Could not parse form body: {e}") from e

    return IncomingQuestion(question=question, model_name=model_name, image=image)


def _text_field(value) -> str | None:
    return value if isinstance(value, str) else None


async def _read_image(part) -> ImageUpload | None:
    if not isinstance(part, UploadFile):
        return None

    data = await part.read()
    if not data and not part.filename:
        return None

    return ImageUpload(
        data=data,
        filename=part.filename or DEFAULT_FILENAME,
        mime_type=part.content_type or DEFAULT_MIME_TYPE,
    )


def validate(incoming: IncomingQuestion) -> ModelHandle:
    """Check required fields and resolve the requested model.

    Returns:
        The registry handle for the requested model.

    Raises:
        ValidationError: If the question is empty or the model is unknown.
    """
    if not incoming.question:
        raise ValidationError("Question is required.")

    handle = get_model(incoming.model_name)
    if handle is None:
        raise ValidationError("Invalid model selected.")

    return handle


def _safe_filename(filename: str) -> str:
    name = os.path.basename(filename.replace("\x00", "").replace("\\", "/"))
    if name in ("", ".", ".."):
        return DEFAULT_FILENAME
    return name


def relay_image(gateway: GeminiGateway, image: ImageUpload) -> UploadedFile:
    """Stage the image in a temporary directory and upload it to Gemini.

    The temporary directory is removed whether or not the upload succeeds.

    Raises:
        RelayError: If the file cannot be written or the upload fails.
    """
    try:
        with tempfile.TemporaryDirectory(prefix="askai-") as tmpdir:
            path = os.path.join(tmpdir, _safe_filename(image.filename))
            with open(path, "wb") as f:
                f.write(image.data)

            logger.debug("relay.staged", path=path, size=len(image.data))
            return gateway.upload_file(path, mime_type=image.mime_type, display_name=image.filename)
    except (OSError, ValueError) as e:
        raise RelayError(f"Could not stage image for upload: {e}") from e


def build_history(question: str, uploaded: UploadedFile | None = None) -> list[types.Content]:
    """Build the chat history: the question turn, then the file turn if any."""
    history = [
        types.Content(role="user", parts=[types.Part(text=question)]),
    ]

    if uploaded is not None:
        history.append(
            types.Content(
                role="user",
                parts=[
                    types.Part(
                        file_data=types.FileData(
                            mime_type=uploaded.mime_type,
                            file_uri=uploaded.uri,
                        )
                    )
                ],
            )
        )

    return history
