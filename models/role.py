from __future__ import annotations

import enum
from typing import Optional


class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Return the matching Role, or None for anything unknown."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return None
