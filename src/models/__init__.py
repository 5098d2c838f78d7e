"""
Models package. Importing it registers every table on Base.metadata.
"""

from src.models.base import Base
from src.models.card import Card

__all__ = ["Base", "Card"]
