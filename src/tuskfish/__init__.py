"""
Tuskfish content layer.

Content objects, a criteria builder for composing queries, a SQLite query
layer, and per-type content handlers.
"""

__version__ = "1.0.0"
