"""Unit tests for the Gradio UI (gradio_app)."""

import base64
import io
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from pixelforge.core.history import HISTORY_STORAGE_KEY, GeneratedResult, serialize_history
from pixelforge.core.session import Session
from pixelforge.core.storage import MemoryStorage
from pixelforge.core.styles import ArtStyle, SpriteType
from pixelforge.ui import gradio_app
from pixelforge.utils.exceptions import (
    APIError,
    ConfigurationError,
    GenerationInProgressError,
    ImageProcessingError,
    ValidationError,
)

# Indexes into the tuple returned by _render
STATUS, IMAGE, CAPTION, DOWNLOAD, ANIMATE, DELETE, GALLERY = range(7)
REFERENCE, CLEAR_REF, PROMPT, GENERATE, STYLE, FIRST_SUGGESTION = range(7, 13)


def _png_b64() -> str:
    buf = io.BytesIO()
    Image.new("RGB", (2, 2), color=(0, 0, 255)).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


PNG_B64 = _png_b64()


def _image_response() -> dict:
    return {
        "candidates": [
            {"content": {"parts": [{"inlineData": {"mimeType": "image/png", "data": PNG_B64}}]}}
        ]
    }


def _storage_results(*ids: str) -> list[GeneratedResult]:
    return [
        GeneratedResult(
            id=i,
            image_url=f"data:image/png;base64,{PNG_B64}",
            prompt=f"prompt {i}",
            style=ArtStyle.VOXEL,
            type=SpriteType.SINGLE_CHARACTER,
            created_at=1_700_000_000_000,
        )
        for i in ids
    ]


def _storage_with(*ids: str) -> MemoryStorage:
    return MemoryStorage({HISTORY_STORAGE_KEY: serialize_history(_storage_results(*ids))})


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock()
    mock.generate_content.return_value = _image_response()
    return mock


@pytest.fixture(autouse=True)
def _isolated_tempdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(gradio_app.tempfile, "gettempdir", lambda: str(tmp_path))
    yield
    gradio_app.set_session(None)


def _use_session(client: MagicMock, *ids: str) -> Session:
    session = Session.load(_storage_with(*ids), client=client)
    gradio_app.set_session(session)
    return session


@pytest.mark.unit
class TestExceptionToMessage:
    """Test exception-to-user-message mapping."""

    def test_validation_error(self) -> None:
        msg = gradio_app._exception_to_message(ValidationError("Bad prompt", field="prompt"))
        assert "Bad prompt" in msg
        assert "prompt" in msg

    def test_configuration_error(self) -> None:
        msg = gradio_app._exception_to_message(ConfigurationError("Missing API key"))
        assert msg == "Missing API key"

    def test_busy_error(self) -> None:
        msg = gradio_app._exception_to_message(GenerationInProgressError("Busy."))
        assert msg == "Busy."

    def test_api_error(self) -> None:
        msg = gradio_app._exception_to_message(APIError("Rate limit exceeded"))
        assert msg == "Rate limit exceeded"

    def test_image_processing_error(self) -> None:
        msg = gradio_app._exception_to_message(ImageProcessingError("Invalid format"))
        assert msg == "Invalid format"

    def test_unknown_error_without_message(self) -> None:
        msg = gradio_app._exception_to_message(RuntimeError())
        assert msg == "Failed to generate sprite. Please try again."


@pytest.mark.unit
class TestFormatStatus:
    def test_idle_is_empty(self) -> None:
        assert gradio_app._format_status("anything", "idle") == ""

    def test_error_contains_message(self) -> None:
        html = gradio_app._format_status("Boom", "error")
        assert "Boom" in html
        assert "❌" in html


@pytest.mark.unit
class TestRender:
    """Test view updates derived from session state."""

    def test_empty_session(self, client: MagicMock) -> None:
        session = _use_session(client)
        out = gradio_app._render(session, prompt="")
        assert out[IMAGE] is None
        assert out[CAPTION] == "### Ready to Forge"
        assert out[DOWNLOAD]["visible"] is False
        assert out[ANIMATE]["interactive"] is False
        assert out[DELETE]["interactive"] is False
        assert out[GALLERY] == []
        assert out[REFERENCE]["visible"] is False
        assert out[PROMPT]["label"] == gradio_app.PROMPT_LABEL
        assert out[GENERATE]["value"] == gradio_app.GENERATE_LABEL
        assert out[GENERATE]["interactive"] is False

    def test_active_result_shown(self, client: MagicMock, tmp_path: Path) -> None:
        session = _use_session(client, "b", "a")
        out = gradio_app._render(session, prompt="A knight")
        assert out[IMAGE] == str(tmp_path / "pixelforge" / "pixelforge-b.png")
        assert Path(out[IMAGE]).is_file()
        assert out[CAPTION] == "**Voxel • Single Character**"
        assert out[DOWNLOAD]["visible"] is True
        assert out[ANIMATE]["interactive"] is True
        assert [caption for _path, caption in out[GALLERY]] == [
            "Voxel • Single Character"
        ] * 2
        assert out[GENERATE]["interactive"] is True

    def test_unknown_prompt_leaves_generate_interactivity(self, client: MagicMock) -> None:
        session = _use_session(client)
        out = gradio_app._render(session)
        assert "interactive" not in out[GENERATE]

    def test_reference_mode_labels_and_suggestions(self, client: MagicMock) -> None:
        session = _use_session(client, "a")
        session.use_as_reference("a")
        out = gradio_app._render(session, prompt="")
        assert out[REFERENCE]["visible"] is True
        assert "Using character reference" in out[REFERENCE]["value"]
        assert out[CLEAR_REF]["visible"] is True
        assert out[PROMPT]["label"] == gradio_app.PROMPT_LABEL_WITH_REFERENCE
        assert out[GENERATE]["value"] == gradio_app.GENERATE_LABEL_WITH_REFERENCE
        suggestions = [u["value"] for u in out[FIRST_SUGGESTION:]]
        assert suggestions[0] == "Walking cycle side view"


@pytest.mark.unit
class TestHandlers:
    """Test event handlers against a session with a fake client."""

    def test_load_shows_restored_history(self, client: MagicMock) -> None:
        _use_session(client, "b", "a")
        out = gradio_app._load_handler("")
        assert len(out[GALLERY]) == 2
        assert out[CAPTION].startswith("**")

    def test_load_with_non_data_url_entry_starts_empty(self, client: MagicMock) -> None:
        stored = json.loads(serialize_history(_storage_results("a")))
        stored[0]["imageUrl"] = "https://example.com/a.png"
        storage = MemoryStorage({HISTORY_STORAGE_KEY: json.dumps(stored)})
        gradio_app.set_session(Session.load(storage, client=client))

        out = gradio_app._load_handler("")

        assert out[IMAGE] is None
        assert out[GALLERY] == []
        assert out[CAPTION] == "### Ready to Forge"
        assert storage.get_item(HISTORY_STORAGE_KEY) == "[]"

    def test_prompt_change(self, client: MagicMock) -> None:
        _use_session(client)
        assert gradio_app._prompt_change_handler("")["interactive"] is False
        assert gradio_app._prompt_change_handler("   ")["interactive"] is False
        assert gradio_app._prompt_change_handler("A knight")["interactive"] is True

    def test_background_preset(self) -> None:
        assert gradio_app._background_preset_handler("Green") == "#00FF00"
        assert gradio_app._background_preset_handler("Dark") == "Black"
        assert gradio_app._background_preset_handler(None) == gradio_app.DEFAULT_BACKGROUND

    def test_generate_success(self, client: MagicMock) -> None:
        session = _use_session(client)
        items = list(
            gradio_app._generate_click_handler("A knight", "Pixel Art", "Item Icon", "Black")
        )
        assert len(items) == 2
        pending, done = items
        assert pending[GENERATE]["value"] == gradio_app.BUSY_LABEL
        assert pending[GENERATE]["interactive"] is False
        assert "Done in" in done[STATUS]
        assert done[GENERATE]["interactive"] is True
        assert len(session.history) == 1
        assert done[CAPTION] == "**Pixel Art • Item Icon**"
        assert "Black" in client.generate_content.call_args[0][0].text

    def test_generate_with_reference_uses_busy_reference_label(self, client: MagicMock) -> None:
        session = _use_session(client, "a")
        session.use_as_reference("a")
        pending = next(
            gradio_app._generate_click_handler("Running", "Voxel", "Sprite Sheet (Grid)", "")
        )
        assert pending[GENERATE]["value"] == gradio_app.BUSY_LABEL_WITH_REFERENCE

    def test_generate_error_keeps_history(self, client: MagicMock) -> None:
        client.generate_content.side_effect = APIError("Rate limit exceeded", status_code=429)
        session = _use_session(client, "a")
        items = list(gradio_app._generate_click_handler("A knight", "Pixel Art", "Item Icon", ""))
        assert "Rate limit exceeded" in items[-1][STATUS]
        assert [r.id for r in session.history] == ["a"]
        assert session.active.id == "a"

    def test_generate_empty_prompt_message(self, client: MagicMock) -> None:
        _use_session(client)
        items = list(gradio_app._generate_click_handler("  ", "Pixel Art", "Item Icon", ""))
        assert "Prompt cannot be empty" in items[-1][STATUS]
        client.generate_content.assert_not_called()

    def test_generate_unexpected_error_message(self, client: MagicMock) -> None:
        client.generate_content.side_effect = RuntimeError("socket closed")
        _use_session(client)
        items = list(gradio_app._generate_click_handler("A knight", "Pixel Art", "Item Icon", ""))
        assert "socket closed" in items[-1][STATUS]

    def test_gallery_select(self, client: MagicMock) -> None:
        session = _use_session(client, "b", "a")
        evt = MagicMock()
        evt.index = 1
        gradio_app._gallery_select_handler("", evt)
        assert session.active.id == "a"

    def test_delete_active(self, client: MagicMock) -> None:
        session = _use_session(client, "b", "a")
        out = gradio_app._delete_click_handler("")
        assert [r.id for r in session.history] == ["a"]
        assert session.active.id == "a"
        assert len(out[GALLERY]) == 1

    def test_delete_write_failure_keeps_entry(self, client: MagicMock) -> None:
        session = _use_session(client, "b", "a")
        with patch.object(MemoryStorage, "set_item", side_effect=OSError("disk full")):
            out = gradio_app._delete_click_handler("")
        assert "Failed to save history" in out[STATUS]
        assert [r.id for r in session.history] == ["b", "a"]
        assert session.active.id == "b"
        assert len(out[GALLERY]) == 2

    def test_delete_without_active_is_noop(self, client: MagicMock) -> None:
        session = _use_session(client)
        out = gradio_app._delete_click_handler("")
        assert session.history == []
        assert out[CAPTION] == "### Ready to Forge"

    def test_animate_sets_reference_style_and_clears_prompt(self, client: MagicMock) -> None:
        session = _use_session(client, "a")
        out = gradio_app._animate_click_handler("old prompt")
        assert session.reference.id == "a"
        assert out[PROMPT]["value"] == ""
        assert out[STYLE]["value"] == ArtStyle.VOXEL.value
        assert out[GENERATE]["interactive"] is False

    def test_clear_reference(self, client: MagicMock) -> None:
        session = _use_session(client, "a")
        session.use_as_reference("a")
        out = gradio_app._clear_reference_handler("")
        assert session.reference is None
        assert out[REFERENCE]["visible"] is False


@pytest.mark.unit
class TestBuildBlocksAndLaunch:
    """Test _build_blocks and launch (build UI, no server)."""

    def test_build_blocks_returns_blocks(self) -> None:
        app = gradio_app._build_blocks()
        assert app is not None

    def test_launch_calls_build_and_launch(self) -> None:
        """launch() builds app and calls app.launch with host/port/share."""
        with patch("pixelforge.ui.gradio_app._build_blocks") as mock_build:
            mock_app = MagicMock()
            mock_build.return_value = mock_app
            gradio_app.launch(server_name="0.0.0.0", server_port=9999, share=True)
            mock_build.assert_called_once()
            mock_app.launch.assert_called_once()
            call_kw = mock_app.launch.call_args[1]
            assert call_kw["server_name"] == "0.0.0.0"
            assert call_kw["server_port"] == 9999
            assert call_kw["share"] is True


@pytest.mark.unit
class TestMainEntryPoint:
    """Test main() entry point (pixelforge-ui --port etc.)."""

    def test_main_parses_port_and_calls_launch(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """main() parses --port and passes it to launch()."""
        monkeypatch.delenv("PIXELFORGE_UI_SHARE", raising=False)
        with patch("pixelforge.ui.gradio_app.launch") as mock_launch:
            with patch.object(sys, "argv", ["pixelforge-ui", "--port", "8888"]):
                gradio_app.main()
            mock_launch.assert_called_once()
            assert mock_launch.call_args[1]["server_port"] == 8888
            assert mock_launch.call_args[1]["server_name"] is None
            assert mock_launch.call_args[1]["share"] is False

    def test_main_parses_host_and_share(self) -> None:
        """main() parses --host and --share."""
        with patch("pixelforge.ui.gradio_app.launch") as mock_launch:
            with patch.object(
                sys, "argv", ["pixelforge-ui", "--port", "9000", "--host", "0.0.0.0", "--share"]
            ):
                gradio_app.main()
            mock_launch.assert_called_once()
            assert mock_launch.call_args[1]["server_port"] == 9000
            assert mock_launch.call_args[1]["server_name"] == "0.0.0.0"
            assert mock_launch.call_args[1]["share"] is True
