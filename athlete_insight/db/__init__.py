"""Database primitives for the local cache."""

from .base import Base
from .session import create_engine, create_session_factory

__all__ = ["Base", "create_engine", "create_session_factory"]
