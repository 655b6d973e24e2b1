"""Unit tests for the ask pipeline stages."""

import os

import pytest

from askai.core.errors import ProcessingError, RelayError, ValidationError
from askai.core.gemini_client import UploadedFile
from askai.core.pipeline import (
    ImageUpload,
    IncomingQuestion,
    _safe_filename,
    build_history,
    relay_image,
    validate,
)


@pytest.fixture
def image(sample_png) -> ImageUpload:
    return ImageUpload(data=sample_png, filename="cat.png", mime_type="image/png")


class TestValidate:

    def test_returns_handle(self):
        handle = validate(IncomingQuestion(question="hi", model_name="gemini-1.5-flash"))
        assert handle.key == "gemini-1.5-flash"

    @pytest.mark.parametrize("question", [None, ""])
    def test_question_required(self, question):
        with pytest.raises(ValidationError) as exc:
            validate(IncomingQuestion(question=question, model_name="gemini-1.5-flash"))
        assert exc.value.message == "Question is required."

    @pytest.mark.parametrize("model_name", [None, "", "not-a-real-model", "GEMINI-1.5-FLASH"])
    def test_model_must_be_registered(self, model_name):
        with pytest.raises(ValidationError) as exc:
            validate(IncomingQuestion(question="hi", model_name=model_name))
        assert exc.value.message == "Invalid model selected."

    def test_whitespace_question_is_accepted(self):
        assert validate(IncomingQuestion(question="  ", model_name="gemini-1.5-flash"))


class TestBuildHistory:

    def test_text_only(self):
        history = build_history("What is 2+2?")
        assert len(history) == 1
        assert history[0].role == "user"
        assert history[0].parts[0].text == "What is 2+2?"

    def test_with_file(self):
        uploaded = UploadedFile(uri="https://files.example/f1", mime_type="image/jpeg")
        history = build_history("Describe it", uploaded)

        assert len(history) == 2
        assert history[0].parts[0].text == "Describe it"
        file_part = history[1].parts[0]
        assert history[1].role == "user"
        assert file_part.text is None
        assert file_part.file_data.file_uri == "https://files.example/f1"
        assert file_part.file_data.mime_type == "image/jpeg"


class TestRelayImage:

    def test_uploads_staged_copy(self, fake_gateway, image, sample_png):
        uploaded = relay_image(fake_gateway, image)

        assert uploaded.uri == "https://files.example/abc123"
        assert len(fake_gateway.uploads) == 1
        call = fake_gateway.uploads[0]
        assert call["existed"]
        assert call["data"] == sample_png
        assert os.path.basename(call["path"]) == "cat.png"
        assert call["display_name"] == "cat.png"

    def test_temp_file_removed_after_success(self, fake_gateway, image):
        relay_image(fake_gateway, image)
        path = fake_gateway.uploads[0]["path"]
        assert not os.path.exists(path)
        assert not os.path.exists(os.path.dirname(path))

    def test_temp_file_removed_after_failure(self, fake_gateway, image):
        fake_gateway.upload_error = RelayError("Gemini file upload failed: 500")

        with pytest.raises(RelayError):
            relay_image(fake_gateway, image)

        path = fake_gateway.uploads[0]["path"]
        assert not os.path.exists(path)

    def test_path_traversal_filename_is_flattened(self, fake_gateway, sample_png):
        image = ImageUpload(data=sample_png, filename="../../etc/passwd", mime_type="image/png")
        relay_image(fake_gateway, image)

        call = fake_gateway.uploads[0]
        assert os.path.basename(call["path"]) == "passwd"
        # display name keeps what the client sent
        assert call["display_name"] == "../../etc/passwd"

    def test_nul_byte_in_filename_is_stripped(self, fake_gateway, sample_png):
        image = ImageUpload(data=sample_png, filename="a\x00b.png", mime_type="image/png")
        relay_image(fake_gateway, image)

        assert os.path.basename(fake_gateway.uploads[0]["path"]) == "ab.png"
        assert not os.path.exists(fake_gateway.uploads[0]["path"])

    def test_staging_value_error_raises_relay_error(self, fake_gateway, image, mocker):
        mocker.patch("askai.core.pipeline.open", side_effect=ValueError("embedded null byte"), create=True)

        with pytest.raises(RelayError):
            relay_image(fake_gateway, image)

        assert fake_gateway.uploads == []

    def test_relay_error_is_processing_error(self):
        assert issubclass(RelayError, ProcessingError)


class TestSafeFilename:

    @pytest.mark.parametrize("raw, expected", [
        ("cat.png", "cat.png"),
        ("dir/cat.png", "cat.png"),
        ("C:\\Users\\me\\cat.png", "cat.png"),
        ("..", "image"),
        ("x\x00.png", "x.png"),
        ("", "image"),
    ])
    def test_safe_filename(self, raw, expected):
        assert _safe_filename(raw) == expected
