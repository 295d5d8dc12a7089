"""Caller identity as supplied by the identity layer (read-only)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from agritrace.models.events import Role


class Actor(BaseModel):
    """The acting party: a display label, a raw role code, and an address."""

    model_config = ConfigDict(frozen=True)

    label: str
    role: int | None = None
    address: str = ""

    @property
    def known_role(self) -> Role | None:
        """The role as a ``Role`` member, or ``None`` if unrecognized."""
        return Role.coerce(self.role)
