"""Configuration management."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from ..utils.exceptions import ConfigurationError
from .models import Config

DEFAULT_CONFIG: Dict[str, Any] = {
    "llm": {
        "provider": "openai",
        "model": "gpt-4o-mini",
        "api_key": "${OPENAI_API_KEY}",
        "temperature": 0.7,
        "max_tokens": 1000,
        "timeout": 30,
    },
    "store": {
        "catalog_path": "data/movies.json",
        "users_path": "data/users.json",
    },
    "recommendations": {
        "tool_search_limit": 5,
        "mood_limit": 5,
        "browse_limit": 20,
        "similar_limit": 5,
    },
    "chat": {
        "assistant_name": "CineMatch",
        "context_window": 5,
    },
    "logging": {
        "level": "INFO",
    },
}


class ConfigManager:
    """Manages application configuration loading and validation."""

    def __init__(self, config_path: Optional[Path] = None, load_env: bool = True):
        """Initialize config manager.

        Args:
            config_path: Path to configuration file. If None, searches standard locations.
            load_env: Load a ``.env`` file into the environment before expanding variables.
        """
        self._config_path = config_path
        self._config: Optional[Config] = None
        self._load_env = load_env

    def load_config(self) -> Config:
        """Load and validate configuration.

        Returns:
            Validated configuration object.

        Raises:
            FileNotFoundError: If configuration file is not found.
            ConfigurationError: If configuration is invalid.
        """
        if self._config is not None:
            return self._config

        if self._load_env:
            load_dotenv()

        config_path = self._find_config_file()
        raw_config = self._load_yaml_file(config_path)

        try:
            self._config = Config(**raw_config)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return self._config

    def get_config(self) -> Config:
        """Get current configuration, loading if necessary.

        Returns:
            Current configuration object.
        """
        if self._config is None:
            return self.load_config()
        return self._config

    @property
    def config_file(self) -> Path:
        """Path of the configuration file that is, or would be, loaded.

        Raises:
            FileNotFoundError: If no configuration file is found.
        """
        return self._find_config_file()

    def _find_config_file(self) -> Path:
        """Find configuration file in standard locations.

        Returns:
            Path to configuration file.

        Raises:
            FileNotFoundError: If no configuration file is found.
        """
        if self._config_path is not None:
            if self._config_path.exists():
                return self._config_path
            raise FileNotFoundError(f"Configuration file not found: {self._config_path}")

        search_paths = [
            Path.cwd() / "config" / "config.yaml",
            Path.cwd() / "config.yaml",
            Path.home() / ".config" / "cinematch" / "config.yaml",
            Path.home() / ".cinematch" / "config.yaml",
        ]

        env_config = os.getenv("CINEMATCH_CONFIG")
        if env_config:
            search_paths.insert(0, Path(env_config))

        for path in search_paths:
            if path.exists():
                return path

        raise FileNotFoundError(
            f"Configuration file not found in any of these locations: "
            f"{[str(p) for p in search_paths]}"
        )

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        """Load YAML file with environment variable expansion.

        Args:
            path: Path to YAML file.

        Returns:
            Parsed YAML data with environment variables expanded.

        Raises:
            ConfigurationError: If YAML parsing fails.
        """
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()

        content = os.path.expandvars(content)

        try:
            result = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML file {path}: {e}") from e

        if not isinstance(result, dict):
            raise ConfigurationError(f"YAML file {path} must contain a dictionary at root level")
        return result

    @classmethod
    def create_default_config(cls, output_path: Path) -> None:
        """Create a default configuration file.

        Args:
            output_path: Path where to create the configuration file.
        """
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, indent=2, sort_keys=False)

    def validate_config_file(self, config_path: Path) -> bool:
        """Validate a configuration file without loading it as current config.

        Args:
            config_path: Path to configuration file to validate.

        Returns:
            True if configuration is valid, False otherwise.
        """
        try:
            raw_config = self._load_yaml_file(config_path)
            Config(**raw_config)
            return True
        except (ValidationError, ConfigurationError, FileNotFoundError):
            return False
