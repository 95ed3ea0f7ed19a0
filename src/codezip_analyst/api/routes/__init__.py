"""Route handlers for the API."""

from codezip_analyst.api.routes import archives, health

__all__ = [
    "archives",
    "health",
]
