"""Database layer for Write Out Loud (SQLAlchemy 2.0)."""

from __future__ import annotations

from writeoutloud.db.base import Base
from writeoutloud.db.engine import DatabaseManager

__all__ = ["Base", "DatabaseManager"]
