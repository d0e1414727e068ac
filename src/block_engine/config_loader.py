"""
Configuration loader for the block engine.
Supports YAML config with local overrides and environment variable substitution.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from block_model import DeploymentMode
from .providers import ProviderConfig

DEFAULT_CONFIG_FILE = "config.yml"
DEFAULT_LOCAL_CONFIG_FILE = "local.config.yml"
CONFIG_FILE_ENV = "WORKFLOW_BLOCKS_CONFIG"


class APIConfig(BaseModel):
    """API configuration"""
    anthropic_api_key: Optional[str] = None


class DeploymentConfig(BaseModel):
    """Deployment mode and the models usable without an API key"""
    mode: DeploymentMode = Field(default=DeploymentMode.HOSTED)
    hosted_models: List[str] = Field(default_factory=list, description="Models covered by the hosted deployment")
    local_models: List[str] = Field(default_factory=list, description="Static list of locally served models")
    ollama_url: Optional[str] = Field(default=None, description="Discover local models from this Ollama server")


class RouterConfig(BaseModel):
    """Sampling settings of the router model call"""
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=100, ge=1)


class GlobalConfig(BaseModel):
    """Complete configuration"""
    api: APIConfig = Field(default_factory=APIConfig)
    deployment: DeploymentConfig = Field(default_factory=DeploymentConfig)
    router: RouterConfig = Field(default_factory=RouterConfig)
    providers: List[ProviderConfig] = Field(default_factory=list)
    blocks_dir: Optional[str] = Field(default=None, description="Block definitions directory override")


class ConfigLoader:
    """Configuration loader with support for local overrides and env vars"""

    _instance: Optional[GlobalConfig] = None

    @staticmethod
    def load(
        config_file: str = DEFAULT_CONFIG_FILE,
        local_config_file: str = DEFAULT_LOCAL_CONFIG_FILE,
        env_file: Optional[str] = ".env",
    ) -> GlobalConfig:
        """
        Load configuration with local overrides and environment variable substitution.

        Args:
            config_file: Default config file path
            local_config_file: Local config file path (optional)
            env_file: dotenv file loaded before placeholders are resolved (optional)

        Returns:
            GlobalConfig object
        """
        if env_file and Path(env_file).exists():
            load_dotenv(env_file)

        # Load default config
        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        # Merge local config if exists
        if Path(local_config_file).exists():
            with open(local_config_file, 'r', encoding='utf-8') as f:
                local_data = yaml.safe_load(f)
            if local_data and config_data:
                config_data = ConfigLoader._deep_merge(config_data, local_data)

        # Resolve environment variables
        if config_data:
            config_data = ConfigLoader._resolve_env_vars(config_data)
        else:
            raise ValueError(f"Config file {config_file} is empty")

        return GlobalConfig.model_validate(config_data)

    @classmethod
    def get_config(cls) -> GlobalConfig:
        """
        Get the process-wide configuration, loading it on first use.

        The config file defaults to config.yml and can be moved with the
        WORKFLOW_BLOCKS_CONFIG environment variable.
        """
        if cls._instance is None:
            cls._instance = cls.load(os.getenv(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE))
        return cls._instance

    @classmethod
    def reset_config(cls) -> None:
        """Reset cached config (for testing)"""
        cls._instance = None

    @staticmethod
    def _deep_merge(base: Any, override: Any) -> Any:
        """Deep merge two dictionaries"""
        if not isinstance(base, dict) or not isinstance(override, dict):
            return override

        result: Dict[str, Any] = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _resolve_env_vars(data: Any) -> Any:
        """Recursively resolve ${VAR} placeholders; unset variables become None"""
        if isinstance(data, dict):
            return {k: ConfigLoader._resolve_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [ConfigLoader._resolve_env_vars(v) for v in data]
        elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
            var_name = data[2:-1]
            return os.getenv(var_name)
        else:
            return data
