from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import field_validator

from qrmenu.schemas.common import CamelModel


class UserCredentials(CamelModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        # Usernames are case-sensitive, only surrounding whitespace is dropped.
        value = value.strip()
        if not value:
            raise ValueError("Username is required")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


@dataclass(frozen=True)
class NewUser:
    username: str
    password_hash: str = field(repr=False)


class UserOut(CamelModel):
    id: int
    username: str
