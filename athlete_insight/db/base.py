"""
Declarative base for cache tables.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all cache models."""
    pass
