"""Entity records returned by the Mattermost REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    roles: str = ""
    is_bot: bool = False
    delete_at: int = 0
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            username=data.get("username", ""),
            email=data.get("email", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            nickname=data.get("nickname", ""),
            roles=data.get("roles", ""),
            is_bot=data.get("is_bot", False),
            delete_at=data.get("delete_at", 0),
            raw=data,
        )


@dataclass(frozen=True)
class Bot:
    user_id: str
    username: str
    display_name: str = ""
    description: str = ""
    owner_id: str = ""
    delete_at: int = 0
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def disabled(self) -> bool:
        return self.delete_at != 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Bot":
        return cls(
            user_id=data["user_id"],
            username=data.get("username", ""),
            display_name=data.get("display_name", ""),
            description=data.get("description", ""),
            owner_id=data.get("owner_id", ""),
            delete_at=data.get("delete_at", 0),
            raw=data,
        )


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    display_name: str = ""
    type: str = "O"
    delete_at: int = 0
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Team":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            display_name=data.get("display_name", ""),
            type=data.get("type", "O"),
            delete_at=data.get("delete_at", 0),
            raw=data,
        )


@dataclass(frozen=True)
class BotPatch:
    """Only fields that are not None are sent."""

    username: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None

    def to_api(self) -> dict[str, str]:
        payload: dict[str, str] = {}
        if self.username is not None:
            payload["username"] = self.username
        if self.display_name is not None:
            payload["display_name"] = self.display_name
        if self.description is not None:
            payload["description"] = self.description
        return payload

    def is_empty(self) -> bool:
        return not self.to_api()
