"""External integrations."""

from .groq import GroqClient, GroqError

__all__ = ["GroqClient", "GroqError"]
