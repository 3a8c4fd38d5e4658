"""Configuration for in-memory writer."""

from pydantic import BaseModel


class InMemoryWriterConfig(BaseModel):
    """Configuration for in-memory writer (no options)."""
