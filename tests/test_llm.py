from core.config import Settings
from core.llm import get_analysis_client
from services.analysis_client import ImageAnalysisClient, UnconfiguredAnalysisClient


def test_missing_key_returns_unconfigured_client():
    client = get_analysis_client(Settings(VISION_API_KEY=None))
    assert isinstance(client, UnconfiguredAnalysisClient)


def test_configured_client_uses_settings():
    config = Settings(VISION_API_KEY="test-key", VISION_MODEL_NAME="vision-test", VISION_TEMPERATURE=0.3)
    client = get_analysis_client(config)

    assert isinstance(client, ImageAnalysisClient)
    assert client.model == "vision-test"
    assert client.temperature == 0.3
