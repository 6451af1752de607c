"""Closed enumerations shared by models, schemas and auth"""
import enum
from typing import Optional


class Role(str, enum.Enum):
    """Product-management roles carried in the ``role`` token claim"""

    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class Category(str, enum.Enum):
    RINGS = "RINGS"
    NECKLACES = "NECKLACES"
    EARRINGS = "EARRINGS"
    BRACELETS = "BRACELETS"
    WATCHES = "WATCHES"
    BROOCHES = "BROOCHES"
    PENDANTS = "PENDANTS"
    SETS = "SETS"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: str) -> Optional["Category"]:
        """Case-insensitive lookup; None for unknown names"""
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None
