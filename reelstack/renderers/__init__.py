from ..errors import ConfigurationError
from .base import TemplateRenderer, FORMATS
from .cloudformation import CloudFormationRenderer
from .manifest import ManifestRenderer

RENDERERS = {
    CloudFormationRenderer.name: CloudFormationRenderer,
    ManifestRenderer.name: ManifestRenderer,
}


def get_renderer(name: str) -> TemplateRenderer:
    try:
        return RENDERERS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown renderer '{name}', expected one of: {', '.join(RENDERERS)}") from None


__all__ = ['TemplateRenderer', 'CloudFormationRenderer', 'ManifestRenderer',
           'FORMATS', 'RENDERERS', 'get_renderer']
