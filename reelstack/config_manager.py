"""
config_manager.py: module for managing multiple configuration sources
"""
import os
from pathlib import Path
import yaml
from dotenv import dotenv_values
from typing import Dict, Any, Optional, Mapping
from enum import Enum

from .errors import ConfigurationError

ENV_PREFIX = "REELSTACK_"
PROJECT_CONFIG_NAMES = ("reelstack.yaml", ".reelstack.yaml")


class ConfigSource(Enum):
    """Enumeration of configuration sources"""
    DEFAULTS = "defaults"
    GLOBAL_CONFIG = "global_config"  # ~/.config/reelstack/config.yaml
    PROJECT_CONFIG = "project_config"  # ./reelstack.yaml in project
    DOTENV = "dotenv"  # .env file in current directory
    ENVIRONMENT = "environment"  # REELSTACK_* environment variables
    COMMAND_LINE = "command_line"  # Command line arguments


DEFAULT_STACK_CONFIG = {
    "stack_name": "EcsServicesStack",
    "vpc_id": None,
    "image": "hello-world",
    "certificate_arn": None,
    "renderer": "cloudformation",
    "format": "yaml",
    "output_dir": "build",
    "log_level": "INFO",
}


class ConfigManager:
    """
    ConfigManager: class that manages multiple configuration sources with priority order
    """

    def __init__(self, home: Optional[Path] = None, cwd: Optional[Path] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 project_file: Optional[Path] = None, must_exist: bool = True):
        self.home = home or Path.home()
        self.cwd = cwd or Path.cwd()
        self.environ = os.environ if environ is None else environ
        self.project_file = project_file
        self.must_exist = must_exist
        self.config_data: Dict[str, Any] = {}
        self.priority_order = [
            ConfigSource.DEFAULTS,
            ConfigSource.GLOBAL_CONFIG,
            ConfigSource.PROJECT_CONFIG,
            ConfigSource.DOTENV,
            ConfigSource.ENVIRONMENT,
            ConfigSource.COMMAND_LINE
        ]

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Load configuration following priority order; overrides play the
        role of the command line source
        """
        self.config_data = {}
        for source in self.priority_order:
            if source == ConfigSource.COMMAND_LINE:
                source_config = {k: v for k, v in (overrides or {}).items() if v is not None}
            else:
                source_config = self.load_source(source)
            if source_config:
                self._merge_config(self.config_data, source_config)
        return self.config_data

    def load_source(self, source: ConfigSource) -> Dict[str, Any]:
        """Load configuration from a single source"""
        if source == ConfigSource.DEFAULTS:
            return dict(DEFAULT_STACK_CONFIG)
        elif source == ConfigSource.GLOBAL_CONFIG:
            return self._read_yaml(self.global_config_path)
        elif source == ConfigSource.PROJECT_CONFIG:
            return self._load_project_config()
        elif source == ConfigSource.DOTENV:
            return self._load_dotenv_config()
        elif source == ConfigSource.ENVIRONMENT:
            return self._prefixed(self.environ)
        return {}

    @property
    def global_config_path(self) -> Path:
        return self.home / ".config" / "reelstack" / "config.yaml"

    def _load_project_config(self):
        """Load project-specific config, an explicit file wins over discovery"""
        if self.project_file is not None:
            if not self.project_file.exists():
                if not self.must_exist:
                    return {}
                raise ConfigurationError(f"Config file not found: {self.project_file}")
            return self._read_yaml(self.project_file)

        for config_path in self.project_config_candidates():
            if config_path.exists():
                return self._read_yaml(config_path)
        return {}

    def project_config_candidates(self):
        """Files that count as the project config, in discovery order"""
        if self.project_file is not None:
            return [self.project_file]
        return [self.cwd / name for name in PROJECT_CONFIG_NAMES]

    def _load_dotenv_config(self):
        """Load REELSTACK_* values from a .env file without touching os.environ"""
        dotenv_path = self.cwd / ".env"
        if not dotenv_path.exists():
            return {}
        return self._prefixed(dotenv_values(dotenv_path))

    @staticmethod
    def _prefixed(values: Mapping[str, Optional[str]]) -> Dict[str, Any]:
        # Convert REELSTACK_OUTPUT_DIR to output_dir
        return {
            key[len(ENV_PREFIX):].lower(): value
            for key, value in values.items()
            if key.startswith(ENV_PREFIX) and value is not None
        }

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
        return data

    def _merge_config(self, base: Dict[str, Any], update: Dict[str, Any]):
        """Merge update config into base config (nested merge)"""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get_config(self, key: str, default: Any = None):
        """Get a specific configuration value"""
        keys = key.split('.')
        current = self.config_data

        for k in keys:
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default
        return current

    def save_config(self, source: ConfigSource, config_data: Dict[str, Any] = None):
        """Save configuration to a specific source"""
        if config_data is None:
            config_data = self.config_data

        if source == ConfigSource.PROJECT_CONFIG:
            target = self.project_config_candidates()[0]
        else:
            raise ConfigurationError(f"Cannot save configuration to {source.value}")
        with open(target, 'w') as f:
            yaml.dump(config_data, f, indent=2, default_flow_style=False)
        return target
