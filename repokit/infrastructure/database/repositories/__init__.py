"""Database repositories module."""
from .contract import Repositoriable
from .base import BaseRepository

__all__ = [
    'Repositoriable',
    'BaseRepository'
]
