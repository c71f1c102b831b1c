"""
config.py: module for handling stack configuration
"""
from pathlib import Path
from typing import Dict, Any, Optional

from .config_manager import ConfigManager, ConfigSource
from .errors import ConfigurationError
from .models import NetworkContext
from .renderers import FORMATS, RENDERERS

REQUIRED_STRING_KEYS = ("stack_name", "image", "renderer", "format", "output_dir", "log_level")


class StackConfig:
    """
    StackConfig: class that encapsulates the layered configuration used to
    assemble and synthesize the stack
    """
    def __init__(self, config_manager: Optional[ConfigManager] = None):
        self.config_manager = config_manager or ConfigManager()
        self.data: Dict[str, Any] = {}

    def load(self, overrides: Optional[Dict[str, Any]] = None):
        """Load config following priority order"""
        self.data = self.config_manager.load_config(overrides)
        for key in REQUIRED_STRING_KEYS:
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(
                    f"Config value '{key}' must be a non-empty string, got {value!r}")
        self.data["output_dir"] = Path(self.data["output_dir"]).expanduser()
        self.data["format"] = self.data["format"].lower()
        self.data["log_level"] = self.data["log_level"].upper()
        if self.data["format"] not in FORMATS:
            raise ConfigurationError(
                f"Unknown output format '{self.data['format']}', expected one of: {', '.join(FORMATS)}")
        if self.data["renderer"] not in RENDERERS:
            raise ConfigurationError(
                f"Unknown renderer '{self.data['renderer']}', expected one of: {', '.join(RENDERERS)}")
        return self

    def network_context(self) -> NetworkContext:
        """Build the network context from the configured vpc_id"""
        vpc_id = self.data.get("vpc_id")
        if not vpc_id:
            raise ConfigurationError(
                "No vpc_id configured. Pass --vpc-id, set REELSTACK_VPC_ID or add vpc_id to reelstack.yaml.")
        return NetworkContext(str(vpc_id))

    def save(self):
        """Save current config as the project config file"""
        data = dict(self.data)
        data["output_dir"] = str(data["output_dir"])
        return self.config_manager.save_config(ConfigSource.PROJECT_CONFIG, data)
