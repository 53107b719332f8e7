"""Database infrastructure module."""
from .connection import DatabaseConnection
from .named_queries import NamedQuery, NamedQueryRegistry
from .unit_of_work import UnitOfWork, UnitOfWorkState

__all__ = [
    'DatabaseConnection',
    'NamedQuery',
    'NamedQueryRegistry',
    'UnitOfWork',
    'UnitOfWorkState'
]
