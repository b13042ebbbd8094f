"""Database infrastructure"""
from .connection import (
    dispose_engine,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
)

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    "init_db",
]
