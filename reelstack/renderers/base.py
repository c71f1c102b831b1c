import json
from abc import ABC, abstractmethod
from typing import Dict, Any

import yaml

from ..errors import ConfigurationError
from ..models import ResourceGraph

FORMATS = ("yaml", "json")


class TemplateRenderer(ABC):
    """
    Abstract interface for turning a resource graph into a document.
    Concrete implementations decide the target dialect (CloudFormation, a
    tool-neutral manifest, ...).
    """

    name = "base"

    @abstractmethod
    def render(self, graph: ResourceGraph) -> Dict[str, Any]:
        """
        Return a document made of plain dicts, lists, strings, numbers and
        booleans only. Must not mutate the graph.
        """
        pass

    def dump(self, document: Dict[str, Any], fmt: str = "yaml") -> str:
        """Serialize a rendered document, keeping key order."""
        if fmt == "yaml":
            return yaml.safe_dump(document, default_flow_style=False, sort_keys=False, indent=2)
        if fmt == "json":
            return json.dumps(document, indent=2) + "\n"
        raise ConfigurationError(f"Unknown output format '{fmt}', expected one of: {', '.join(FORMATS)}")
