from pathlib import Path

from babylog.config import AIProvider, AppConfig, load_config, resolve_provider


def test_environment_overrides_defaults() -> None:
    config = load_config(
        {
            "AI_PROVIDER": "Anthropic",
            "ANTHROPIC_API_KEY": "sk-ant-test",
            "ANTHROPIC_MODEL": "claude-test",
            "LOG_LEVEL": "DEBUG",
        }
    )
    assert config.ai_provider == AIProvider.ANTHROPIC
    assert config.anthropic_api_key == "sk-ant-test"
    assert config.anthropic_model == "claude-test"
    assert config.log_level == "DEBUG"
    assert config.openai_model == "gpt-4o-mini"


def test_empty_environment_uses_openai() -> None:
    config = load_config({})
    assert config.ai_provider == AIProvider.OPENAI
    assert config.jwt_secret is None


def test_unknown_provider_falls_back_to_default() -> None:
    assert resolve_provider("gemini") == AIProvider.OPENAI
    assert resolve_provider(None) == AIProvider.OPENAI
    assert resolve_provider(" ANTHROPIC ") == AIProvider.ANTHROPIC


def test_database_path_resolution(tmp_path: Path) -> None:
    absolute = tmp_path / "logs.db"
    assert AppConfig(database_path=str(absolute)).resolved_database_path == absolute

    relative = AppConfig(database_path="./data/test.db").resolved_database_path
    assert relative.is_absolute()
    assert relative.name == "test.db"
    assert relative.parent.name == "data"
