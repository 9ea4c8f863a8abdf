"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from .models import ExporterConfig


class ConfigLoader:
    """Load and validate exporter configuration."""

    @staticmethod
    def load_from_file(config_path: str) -> ExporterConfig:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ExporterConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
        """
        return ExporterConfig(**ConfigLoader._read_raw(config_path))

    @staticmethod
    def from_args(
        mountpoints: Optional[str] = None,
        port: Optional[int] = None,
        listen_address: Optional[str] = None,
        timeout: Optional[float] = None,
        use_sudo: Optional[bool] = None,
        log_level: Optional[str] = None,
        config_path: Optional[str] = None
    ) -> ExporterConfig:
        """
        Build configuration from command-line values.

        A YAML file, when given, provides the base; any CLI value that is
        not None overrides the corresponding file setting.

        Raises:
            FileNotFoundError: If config_path doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If the merged configuration is invalid
        """
        raw_config = ConfigLoader._read_raw(config_path) if config_path else {}
        raw_config['command'] = raw_config.get('command') or {}
        raw_config['server'] = raw_config.get('server') or {}

        if mountpoints is not None:
            raw_config['mountpoints'] = mountpoints
        if port is not None:
            raw_config['server']['port'] = port
        if listen_address is not None:
            raw_config['server']['listen_address'] = listen_address
        if timeout is not None:
            raw_config['command']['timeout_seconds'] = timeout
        if use_sudo is not None:
            raw_config['command']['use_sudo'] = use_sudo
        if log_level is not None:
            raw_config['log_level'] = log_level

        return ExporterConfig(**raw_config)

    @staticmethod
    def _read_raw(config_path: str) -> Dict[str, Any]:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        if not isinstance(raw_config, dict):
            raise ValueError(f"Configuration root must be a mapping: {config_path}")

        return ConfigLoader._substitute_env_vars(raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
