"""
Scorecard — Declarative Base

Every table shares one MetaData with a fixed constraint naming convention so
create_all() produces the same index/constraint names on every backend.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for the card store models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
