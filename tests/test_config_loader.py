"""Tests for configuration loading"""

import pytest

from block_engine import BlockEngine, ConfigLoader, OllamaModelAvailability, StaticModelAvailability
from block_model import DeploymentMode

BASE_CONFIG = """
api:
  anthropic_api_key: ${TEST_BLOCKS_ANTHROPIC_KEY}
deployment:
  mode: hosted
  hosted_models: [claude-haiku-4-5]
router:
  temperature: 0.2
providers:
  - id: anthropic
    tool_id: anthropic_chat
    model_patterns: ['^claude']
    pricing:
      claude-haiku-4-5: {input: 1.0, output: 5.0}
"""


@pytest.fixture(autouse=True)
def reset_cached_config():
    ConfigLoader.reset_config()
    yield
    ConfigLoader.reset_config()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(BASE_CONFIG, encoding="utf-8")
    return path


class TestConfigLoader:

    def test_load_resolves_environment_placeholders(self, config_file, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_BLOCKS_ANTHROPIC_KEY", "sk-test")

        config = ConfigLoader.load(str(config_file), str(tmp_path / "local.config.yml"), env_file=None)

        assert config.api.anthropic_api_key == "sk-test"
        assert config.deployment.mode == DeploymentMode.HOSTED
        assert config.router.temperature == 0.2
        assert config.router.max_tokens == 100
        assert config.providers[0].pricing["claude-haiku-4-5"].output == 5.0

    def test_unset_placeholder_becomes_none(self, config_file, tmp_path, monkeypatch):
        monkeypatch.delenv("TEST_BLOCKS_ANTHROPIC_KEY", raising=False)

        config = ConfigLoader.load(str(config_file), str(tmp_path / "local.config.yml"), env_file=None)

        assert config.api.anthropic_api_key is None

    def test_local_config_is_deep_merged(self, config_file, tmp_path):
        """
        Given: a local config overriding only the deployment mode
        When: loading
        Then: the mode changes and sibling settings are kept
        """
        local = tmp_path / "local.config.yml"
        local.write_text("deployment:\n  mode: self_hosted\n  local_models: [llama3]\n", encoding="utf-8")

        config = ConfigLoader.load(str(config_file), str(local), env_file=None)

        assert config.deployment.mode == DeploymentMode.SELF_HOSTED
        assert config.deployment.local_models == ["llama3"]
        assert config.deployment.hosted_models == ["claude-haiku-4-5"]

    def test_dotenv_file_feeds_placeholders(self, config_file, tmp_path, monkeypatch):
        monkeypatch.delenv("TEST_BLOCKS_ANTHROPIC_KEY", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("TEST_BLOCKS_ANTHROPIC_KEY=sk-from-dotenv\n", encoding="utf-8")

        try:
            config = ConfigLoader.load(str(config_file), str(tmp_path / "local.config.yml"), str(env_file))
        finally:
            monkeypatch.delenv("TEST_BLOCKS_ANTHROPIC_KEY", raising=False)

        assert config.api.anthropic_api_key == "sk-from-dotenv"

    def test_empty_config_file(self, tmp_path):
        empty = tmp_path / "config.yml"
        empty.write_text("", encoding="utf-8")

        with pytest.raises(ValueError, match="is empty"):
            ConfigLoader.load(str(empty), str(tmp_path / "local.config.yml"), env_file=None)

    def test_get_config_reads_path_from_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("WORKFLOW_BLOCKS_CONFIG", str(config_file))
        monkeypatch.chdir(config_file.parent)

        first = ConfigLoader.get_config()

        assert ConfigLoader.get_config() is first
        assert first.router.temperature == 0.2


class TestEngineFromConfig:

    def test_static_availability(self, config_file, tmp_path):
        config = ConfigLoader.load(str(config_file), str(tmp_path / "local.config.yml"), env_file=None)

        engine = BlockEngine.from_config(config)

        assert isinstance(engine.availability, StaticModelAvailability)
        assert engine.router_temperature == 0.2
        assert "router" in engine.registry
        assert engine.condition_context() == {"keyless_models": ["claude-haiku-4-5"]}

    def test_ollama_availability(self, config_file, tmp_path):
        local = tmp_path / "local.config.yml"
        local.write_text("deployment:\n  mode: self_hosted\n  ollama_url: http://ollama:11434\n", encoding="utf-8")
        config = ConfigLoader.load(str(config_file), str(local), env_file=None)

        engine = BlockEngine.from_config(config)

        assert isinstance(engine.availability, OllamaModelAvailability)
        assert engine.availability.base_url == "http://ollama:11434"
        assert engine.mode == DeploymentMode.SELF_HOSTED
