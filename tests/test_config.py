from core.config import DEFAULT_MODEL, DEFAULT_PUBCHEM_TIMEOUT, AppConfig, load_config
from core.pubchem import DEFAULT_BASE_URL


def test_defaults() -> None:
    """Test configuration with an empty environment."""
    config = load_config({})
    assert config == AppConfig()
    assert config.model_name == DEFAULT_MODEL
    assert config.pubchem_url == DEFAULT_BASE_URL
    assert not config.has_api_key


def test_environment_overrides() -> None:
    """Test every supported variable."""
    config = load_config(
        {
            "API_KEY": "fallback",
            "GEMINI_API_KEY": "primary",
            "NOVASYNTH_MODEL": "gemini-custom",
            "NOVASYNTH_PUBCHEM_URL": "http://localhost:9000",
            "NOVASYNTH_PUBCHEM_TIMEOUT": "2.5",
            "NOVASYNTH_LOG_LEVEL": "debug",
        }
    )
    assert config.api_key == "primary"
    assert config.model_name == "gemini-custom"
    assert config.pubchem_url == "http://localhost:9000"
    assert config.pubchem_timeout == 2.5
    assert config.log_level == "DEBUG"


def test_api_key_fallback_variable() -> None:
    """Test the secondary key variable."""
    assert load_config({"API_KEY": "fallback"}).api_key == "fallback"


def test_invalid_timeout_uses_default() -> None:
    """Test that bad numbers fall back to the default."""
    assert load_config({"NOVASYNTH_PUBCHEM_TIMEOUT": "soon"}).pubchem_timeout == DEFAULT_PUBCHEM_TIMEOUT
    assert load_config({"NOVASYNTH_PUBCHEM_TIMEOUT": "-1"}).pubchem_timeout == DEFAULT_PUBCHEM_TIMEOUT


def test_with_api_key() -> None:
    """Test the sidebar key override."""
    config = AppConfig(api_key="env")
    assert config.with_api_key("  typed ").api_key == "typed"
    assert config.with_api_key("") is config
