"""Common type definitions for repokit"""

from typing import TypeVar

# Generic types
KeyT = TypeVar("KeyT")
EntityT = TypeVar("EntityT")
