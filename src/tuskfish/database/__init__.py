"""
Database

SQLite storage for content objects and taglinks, plus the renderer that
compiles criteria objects into parameterised SQL.
"""

from tuskfish.database.database import Database
from tuskfish.database.sql import CompiledQuery, SqlRenderer

__all__ = ['CompiledQuery', 'Database', 'SqlRenderer']
