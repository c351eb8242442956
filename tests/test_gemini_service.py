import io
from unittest.mock import MagicMock, call, patch

import pytest
from PIL import Image

from core.config import AppConfig
from core.gemini_service import (
    COMPARISON_SCHEMA,
    HISTORY_SEPARATOR,
    AnalysisError,
    GeminiService,
    UnsupportedImageError,
    format_history_context,
    prepare_image_part,
)
from core.models import AnalysisResult, AnalysisType


def _service(*texts):
    client = MagicMock()
    client.models.generate_content.side_effect = [MagicMock(text=t) for t in texts]
    return GeminiService(AppConfig(api_key="k", model_name="test-model"), client=client), client


def _sent(client: MagicMock) -> dict:
    return client.models.generate_content.call_args.kwargs


def test_missing_api_key_raises() -> None:
    """Test that building a client requires a key."""
    with pytest.raises(AnalysisError, match="API key"):
        GeminiService(AppConfig(api_key=None))


@patch("core.gemini_service.genai.Client")
def test_each_service_binds_its_own_key(mock_client: MagicMock) -> None:
    """Test that two services with different keys never share a client."""
    mock_client.side_effect = lambda api_key: MagicMock(api_key=api_key)
    first = GeminiService(AppConfig(api_key="KEY-A"))
    second = GeminiService(AppConfig(api_key="KEY-B"))
    assert mock_client.call_args_list == [call(api_key="KEY-A"), call(api_key="KEY-B")]
    assert first._client.api_key == "KEY-A"
    assert second._client.api_key == "KEY-B"
    assert first._client is not second._client


@patch("core.gemini_service.types.GenerateContentConfig")
def test_fenced_response_is_parsed(mock_config: MagicMock) -> None:
    """Test that fenced JSON is accepted."""
    service, client = _service('```json\n{"molecule1": "Aspirin"}\n```')
    assert service.compare_molecules("aspirin", "ibuprofen") == {"molecule1": "Aspirin"}
    sent = _sent(client)
    assert sent["model"] == "test-model"
    assert sent["config"] is mock_config.return_value
    mock_config.assert_called_once_with(response_mime_type="application/json", response_schema=COMPARISON_SCHEMA)


def test_garbage_response_degrades_to_empty() -> None:
    """Test that a non-JSON body becomes an empty object."""
    service, _ = _service("Sorry, I cannot help with that.")
    assert service.analyze_scientific_text("text") == {}


def test_blocked_response_degrades_to_empty() -> None:
    """Test a response that carries no text."""
    service, _ = _service(None)
    assert service.analyze_scientific_text("text") == {}


def test_transport_error_is_wrapped() -> None:
    """Test that SDK failures surface as AnalysisError."""
    client = MagicMock()
    client.models.generate_content.side_effect = RuntimeError("quota exceeded")
    service = GeminiService(AppConfig(api_key="k"), client=client)
    with pytest.raises(AnalysisError, match="quota exceeded"):
        service.generate_research_report([])


def test_validation_requires_literal_true() -> None:
    """Test that only boolean true counts as valid."""
    service, _ = _service('{"mol1Valid": true, "mol2Valid": "true"}')
    assert service.validate_comparison_inputs("aspirin", "x") == {"mol1Valid": True, "mol2Valid": False}


def test_validation_prompt_contains_inputs() -> None:
    """Test that both inputs reach the prompt."""
    service, client = _service('{"mol1Valid": true, "mol2Valid": true}')
    service.validate_comparison_inputs("aspirin", "CCO")
    prompt = _sent(client)["contents"][0]
    assert '"aspirin"' in prompt and '"CCO"' in prompt


def test_image_analysis_sends_image_part() -> None:
    """Test the image request parts."""
    service, client = _service('{"chemicalName": "Caffeine"}')
    assert service.analyze_molecule_image(b"png-bytes", "image/png") == {"chemicalName": "Caffeine"}
    image_part = _sent(client)["contents"][0]
    assert image_part.inline_data.mime_type == "image/png"
    assert image_part.inline_data.data == b"png-bytes"


def test_prepare_image_part_converts_to_jpeg() -> None:
    """Test conversion of formats the API does not accept directly."""
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 0, 0)).save(buffer, format="BMP")
    part = prepare_image_part(buffer.getvalue(), "image/bmp")
    assert part.inline_data.mime_type == "image/jpeg"
    assert part.inline_data.data[:2] == b"\xff\xd8"


def test_prepare_image_part_rejects_undecodable() -> None:
    """Test undecodable bytes and empty uploads."""
    with pytest.raises(UnsupportedImageError, match="Unsupported image format: image/tiff"):
        prepare_image_part(b"not an image", "image/tiff")
    with pytest.raises(UnsupportedImageError, match="Failed to read file data"):
        prepare_image_part(b"", "image/png")


def test_format_history_context() -> None:
    """Test the session context fed to the report prompt."""
    history = [
        AnalysisResult("1", AnalysisType.IMAGE, 0.0, "Aspirin", {"domain": "Pharmacology"}),
        AnalysisResult("2", AnalysisType.TEXT, 0.0, "Text Analysis Session", {}),
    ]
    context = format_history_context(history)
    first, second = context.split(HISTORY_SEPARATOR)
    assert first.startswith("[Item 1] Domain: Pharmacology | Type: IMAGE | Title: Aspirin\nData: ")
    assert second.startswith("[Item 2] Domain: General Science | Type: TEXT")
