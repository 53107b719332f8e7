"""Declarative bases for entity models."""
from .base import Base, TimestampedModel

__all__ = [
    'Base',
    'TimestampedModel'
]
