"""Norwegian-first content generation: research routing, generation fallback, cultural adaptation."""

__version__ = "0.1.0"
