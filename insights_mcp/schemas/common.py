"""Shared response envelope, tool descriptor and error schema."""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ERROR_MARKER = "❌"


class TextBlock(BaseModel):
    """A single text content block."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Standard envelope for every tool result.

    Serialises to the MCP wire shape ``{"content": [...], "isError": bool}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextBlock] = Field(..., min_length=1, max_length=1)
    is_error: bool = Field(False, alias="isError")

    @classmethod
    def success(cls, text: str) -> ToolResult:
        return cls(content=[TextBlock(text=text)], is_error=False)

    @classmethod
    def failure(cls, text: str) -> ToolResult:
        return cls(content=[TextBlock(text=text)], is_error=True)

    @property
    def text(self) -> str:
        return self.content[0].text

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolDescriptor(BaseModel):
    """Immutable identity of a tool, as exposed to discovery."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(..., alias="inputSchema")

    def schema_copy(self) -> dict[str, Any]:
        """A private deep copy of the input schema, safe for callers to mutate."""
        return copy.deepcopy(self.input_schema)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NETWORK = "network"
    UPSTREAM_API = "upstream_api"
    UNEXPECTED_INTERNAL = "unexpected_internal"


class ErrorRecord(BaseModel):
    """Structured description of a failed tool invocation."""

    kind: ErrorKind
    message: str
    status_code: int | None = Field(None, description="HTTP status for upstream_api errors")
    endpoint: str | None = Field(None, description="Upstream path that failed")
    cause: str | None = Field(None, description="Underlying transport error, if any")
    issues: list[str] = Field(default_factory=list, description="Violated constraints")
