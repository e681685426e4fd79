"""Resolved caller identity handed to every core operation."""

from __future__ import annotations

from dataclasses import dataclass


ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"


@dataclass(frozen=True)
class Principal:
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


__all__ = ["Principal", "ROLE_ADMIN", "ROLE_USER"]
