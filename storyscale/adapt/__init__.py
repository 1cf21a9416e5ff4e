"""Cultural adaptation of generated text."""

from storyscale.adapt.adapter import AdaptationContext, CulturalAdapter  # noqa: F401
from storyscale.adapt.tables import DEFAULT_TABLES, AdaptationTables  # noqa: F401
