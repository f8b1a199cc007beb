"""Content blocks carried in tool results."""

from typing import Annotated, Any, Literal

from pydantic import Field

from bmi_health_mcp.types.base import MCPModel
from bmi_health_mcp.types.common import Annotations
from bmi_health_mcp.types.resources import TextResourceContents


class TextContent(MCPModel):
    """Text provided to or from an LLM."""

    type: Literal["text"] = "text"
    text: str
    annotations: Annotations | None = None
    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None


class EmbeddedResource(MCPModel):
    """The contents of a resource, embedded into a tool call result."""

    type: Literal["resource"] = "resource"
    resource: TextResourceContents
    annotations: Annotations | None = None
    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None


ContentBlock = TextContent | EmbeddedResource
