from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from models.role import Role


@dataclass
class User:
    id: int
    email: str
    password_hash: str
    role: Role = Role.USER
    refresh_token: Optional[str] = None

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role.value}>"
