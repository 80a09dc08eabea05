"""
Base model class.

Every database model (Account, LedgerEntry, AuditLog) inherits
from Base. SQLAlchemy uses it to track all models and generate
the correct SQL for table creation.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
