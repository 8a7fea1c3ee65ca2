"""ORM Models - SQLAlchemy declarative models for the relational tables.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so Base.metadata is complete before
      bootstrap creates tables and before relationship() strings resolve
"""

from bookstore.models.user import User  # noqa: F401
from bookstore.models.order import Order  # noqa: F401
from bookstore.models.book import Book  # noqa: F401
from bookstore.models.review import Review  # noqa: F401
