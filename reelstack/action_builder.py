"""
action_builder.py: Module for planning stack synthesis actions
"""
from pathlib import Path
from typing import List, Dict, Any

from .models import ResourceGraph
from .renderers import TemplateRenderer, FORMATS
from .errors import ConfigurationError


class SynthActionBuilder:
    """
    SynthActionBuilder: Class responsible for building the action plan that
    writes a rendered graph to disk
    """

    def __init__(self, graph: ResourceGraph, renderer: TemplateRenderer,
                 fmt: str, output_dir: Path):
        if fmt not in FORMATS:
            raise ConfigurationError(f"Unknown output format '{fmt}', expected one of: {', '.join(FORMATS)}")
        self.graph = graph
        self.renderer = renderer
        self.fmt = fmt
        self.output_dir = Path(output_dir)

    @property
    def template_path(self) -> Path:
        return self.output_dir / f"{self.graph.identity}.template.{self.fmt}"

    @property
    def outputs_path(self) -> Path:
        return self.output_dir / f"{self.graph.identity}.outputs.{self.fmt}"

    def outputs_document(self) -> Dict[str, Any]:
        """Output bindings as operators consume them once provisioned"""
        return {
            "stack": self.graph.identity,
            "outputs": [
                {
                    "name": binding.name,
                    "description": binding.description,
                    "resource": binding.value.logical_id,
                    "attribute": binding.value.attribute,
                }
                for binding in self.graph.outputs
            ],
        }

    def build_synth_actions(self) -> List[Dict[str, Any]]:
        """
        Build actions for synthesizing the stack
        :return: List of action dictionaries
        """
        actions = []

        # 1. Output directory
        actions.append({
            "desc": f"Create directory {self.output_dir}",
            "func": lambda path: path.mkdir(parents=True, exist_ok=True),
            "args": (self.output_dir,)
        })

        # 2. Rendered template; rendering happens at plan time so a bad
        # graph never leaves a half written directory behind
        template_text = self.renderer.dump(self.renderer.render(self.graph), self.fmt)
        actions.append({
            "desc": f"Write {self.renderer.name} template {self.template_path}",
            "func": self.template_path.write_text,
            "args": (template_text,)
        })

        # 3. Output manifest
        outputs_text = self.renderer.dump(self.outputs_document(), self.fmt)
        actions.append({
            "desc": f"Write output bindings {self.outputs_path}",
            "func": self.outputs_path.write_text,
            "args": (outputs_text,)
        })

        return actions
