"""UserProfile model — the identity half of a client session."""

from __future__ import annotations

import json
from typing import Any

from sqlmodel import Field, SQLModel


class UserProfile(SQLModel):
    """Profile of the logged-in user, cached client-side next to the token."""

    email: str
    first_name: str = Field(default="")
    last_name: str = Field(default="")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> UserProfile:
        """Build a profile from a camelCase payload (login response or stored JSON)."""
        return cls.model_validate(
            {
                "email": data.get("email") or "",
                "first_name": data.get("firstName") or "",
                "last_name": data.get("lastName") or "",
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> UserProfile:
        """Parse the serialized form written by :meth:`to_json`.

        Raises ``ValueError`` for malformed JSON or a payload without an email.
        """
        data = json.loads(raw)
        if not isinstance(data, dict) or not data.get("email"):
            raise ValueError("Stored user profile has no email")
        return cls.from_api(data)

    def to_json(self) -> str:
        return json.dumps(
            {"email": self.email, "firstName": self.first_name, "lastName": self.last_name}
        )

    @property
    def display_name(self) -> str:
        """Full name when known, otherwise the email."""
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email
