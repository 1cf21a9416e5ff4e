"""Static research source catalog."""

from storyscale.sources.registry import SourceRegistry, load_registry  # noqa: F401
