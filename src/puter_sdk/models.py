"""Pydantic models for Puter SDK.

Response models keep unknown fields (``extra="allow"``): the backend adds
attributes freely and callers should still be able to read them.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(extra="allow")


# ==================== AUTH ====================


class LoginResult(_Record):
    """Response of /login or /login/otp."""

    proceed: bool = Field(default=False, description="Whether login may proceed")
    token: str | None = Field(None, description="Session token once authenticated")
    next_step: str | None = Field(None, description="Next login step, e.g. 'otp'")
    otp_jwt_token: str | None = Field(None, description="Token for the OTP step")


class User(_Record):
    """Current user, as returned by /whoami."""

    username: str | None = None
    uuid: str | None = None
    email: str | None = None
    email_confirmed: bool | None = None
    is_temp: bool | None = None
    feature_flags: dict[str, Any] = Field(default_factory=dict)


# ==================== FILESYSTEM ====================


class FileEntry(_Record):
    """A file or directory entry."""

    uid: str | None = None
    name: str | None = None
    path: str | None = None
    is_dir: bool = False
    size: int | None = None


class DirectoryHandle(_Record):
    """Directory returned by /mkdir."""

    uid: str | None = Field(None, description="Directory unique identifier")
    path: str | None = Field(None, description="Absolute directory path")


# ==================== APPS & HOSTING ====================


class AppOwner(_Record):
    username: str | None = None


class AppRecord(_Record):
    """App resource returned by the puter-apps driver."""

    uid: str | None = Field(None, description="App unique identifier")
    name: str | None = Field(None, description="App name")
    owner: AppOwner | None = Field(None, description="Owning user")
    index_url: str | None = Field(None, description="URL the app opens")
    title: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None


class SubdomainRecord(_Record):
    """Subdomain binding a DNS label to a storage directory."""

    uid: str | None = None
    subdomain: str | None = None
    root_dir: Any = Field(None, description="Root directory (path or entry)")


class CreatedApp(AppRecord):
    """App record together with the resources provisioned for it."""

    directory: DirectoryHandle
    subdomain: SubdomainRecord


# ==================== AI ====================


class ContentPart(_Record):
    """One typed part of a multi-part message content."""

    type: str = Field(..., description="Part type, e.g. 'text' or 'image_url'")
    text: str | None = None
    url: str | None = None


class ChatMessage(BaseModel):
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str | list[ContentPart | dict[str, Any]]


class ChatOptions(_Record):
    """Options for chat completion.

    Extra keys are passed through to the backend unchanged.
    """

    stream: bool = Field(default=False, description="Stream the response")
    temperature: float | None = Field(None, ge=0, le=2, description="Sampling temperature")
    max_tokens: int | None = Field(None, ge=1, description="Maximum tokens to generate")
    model: str | None = Field(None, description="Model to use")


class ChatCompletion(_Record):
    """Non-streamed chat completion result."""

    message: dict[str, Any] | None = Field(None, description="Assistant message")
    usage: Any = Field(None, description="Token usage reported by the provider")
