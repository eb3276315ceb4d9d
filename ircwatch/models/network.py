"""
Pydantic models for the persisted IRC configuration: networks and their channels.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class NickServ(BaseModel):
    """Registered-identity credentials used when connecting to a network."""

    account: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)


class Channel(BaseModel):
    """A room within a network. An id of 0 marks a channel that was never stored."""

    id: int = 0
    network_id: int = 0
    name: str
    enabled: bool = True
    detached: bool = False
    password: Optional[str] = Field(default=None, repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Channel name cannot be empty.")
        return v


class Network(BaseModel):
    """
    A configured IRC server endpoint.

    The identity is 0 until the network is first inserted; the store writes the
    generated id back into the instance. ``channels`` is an in-memory aggregate and
    is never written by the network store.
    """

    id: int = 0
    enabled: bool = True
    name: str
    server: str
    port: int = 6667
    tls: bool = False
    pass_: Optional[str] = Field(default=None, alias="pass", repr=False)
    invite_command: Optional[str] = None
    nickserv: NickServ = Field(default_factory=NickServ)
    channels: list[Channel] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        populate_by_name = True

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Ensures the port is a usable TCP port."""
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535.")
        return v

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Server host cannot be empty.")
        return v.strip()
