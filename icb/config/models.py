"""Configuration models for the ICB client."""

import codecs
import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


FORBIDDEN_CHARACTERS = ("\x00", "\x01")


def default_user() -> str:
    """Login name taken from the environment, as most ICB clients do."""
    return os.environ.get("USER", "")


class ConnectionConfig(BaseModel):
    """Server address and login identity for one connection."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = "default.icb.net"
    port: int = Field(7326, ge=1, le=65535)
    user: str = Field(default_factory=default_user, validate_default=True)
    nick: str = ""
    group: int | str = 1
    cmd: Literal["login", "w"] = "login"
    passwd: str = ""
    encoding: str = "utf-8"

    @model_validator(mode="before")
    @classmethod
    def default_nick(cls, data: Any) -> Any:
        """Let the nickname fall back to the login name."""
        if isinstance(data, dict) and not data.get("nick"):
            data = {**data, "nick": data.get("user") or default_user()}
        return data

    @field_validator("user")
    @classmethod
    def validate_user(cls, v: str) -> str:
        if not v:
            raise ValueError("user is required (set it explicitly or via $USER)")
        return v

    @field_validator("user", "nick", "passwd")
    @classmethod
    def validate_packet_safe(cls, v: str) -> str:
        """Reject values that would corrupt the login packet."""
        if any(c in v for c in FORBIDDEN_CHARACTERS):
            raise ValueError("must not contain NUL or field delimiter characters")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown text encoding: {v}") from e
        return v

    @field_validator("group")
    @classmethod
    def validate_group(cls, v: int | str) -> int | str:
        if any(c in str(v) for c in FORBIDDEN_CHARACTERS):
            raise ValueError("must not contain NUL or field delimiter characters")
        return v

    def login_fields(self) -> list[str]:
        """Fields of the login packet in wire order."""
        return [self.user, self.nick, str(self.group), self.cmd, self.passwd]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["json", "console"] = "console"
    file: str | None = None


class Settings(BaseModel):
    """Main settings configuration."""

    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
