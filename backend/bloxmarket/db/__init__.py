"""
Database module containing session management and base models.
"""
from bloxmarket.db.session import get_db, async_session_maker, engine
from bloxmarket.db.base import Base

__all__ = ["get_db", "async_session_maker", "engine", "Base"]
