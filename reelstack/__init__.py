"""
reelstack: declarative assembly of the ReelQuotes container services stack
"""
from .assembler import assemble
from .errors import ConfigurationError, ReelstackError
from .models import NetworkContext, ResourceGraph

__all__ = [
    "assemble",
    "ConfigurationError",
    "ReelstackError",
    "NetworkContext",
    "ResourceGraph",
]
