"""Types for resource listing and reading."""

from typing import Annotated, Any, Literal

from pydantic import Field

from bmi_health_mcp.types.base import MCPModel, RequestBase, RequestParams, Result
from bmi_health_mcp.types.common import Annotations

# Widget URIs use the ui:// scheme and carry a cache-busting query string, so
# they are kept as plain strings and compared verbatim.
Uri = str


class TextResourceContents(MCPModel):
    """Text contents of a resource."""

    uri: Uri
    mime_type: Annotated[str | None, Field(alias="mimeType")] = None
    text: str
    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None


class Resource(MCPModel):
    """A known resource that the server is capable of reading."""

    uri: Uri
    name: str
    title: str | None = None
    description: str | None = None
    mime_type: Annotated[str | None, Field(alias="mimeType")] = None
    annotations: Annotations | None = None
    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None


class ResourceTemplate(MCPModel):
    """A template description for resources available on the server."""

    uri_template: Annotated[str, Field(alias="uriTemplate")]
    name: str
    title: str | None = None
    description: str | None = None
    mime_type: Annotated[str | None, Field(alias="mimeType")] = None
    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None


class PaginatedRequestParams(RequestParams):
    """Parameters for list requests. The catalog is small enough to never paginate."""

    cursor: str | None = None


# noinspection PyTypeChecker
class ListResourcesRequest(RequestBase[Literal["resources/list"], PaginatedRequestParams | None]):
    """Request to list available resources."""

    method: Literal["resources/list"] = "resources/list"
    params: PaginatedRequestParams | None = None


class ListResourcesResult(Result):
    """Server's response to a resources/list request."""

    resources: list[Resource]
    next_cursor: Annotated[str | None, Field(alias="nextCursor")] = None


# noinspection PyTypeChecker
class ListResourceTemplatesRequest(RequestBase[Literal["resources/templates/list"], PaginatedRequestParams | None]):
    """Request to list resource templates."""

    method: Literal["resources/templates/list"] = "resources/templates/list"
    params: PaginatedRequestParams | None = None


class ListResourceTemplatesResult(Result):
    """Server's response to a resources/templates/list request."""

    resource_templates: Annotated[list[ResourceTemplate], Field(alias="resourceTemplates")]
    next_cursor: Annotated[str | None, Field(alias="nextCursor")] = None


class ReadResourceRequestParams(RequestParams):
    """Parameters for resources/read."""

    uri: Uri


class ReadResourceRequest(RequestBase[Literal["resources/read"], ReadResourceRequestParams]):
    """Request to read one resource by URI."""

    method: Literal["resources/read"] = "resources/read"


class ReadResourceResult(Result):
    """Server's response to a resources/read request."""

    contents: list[TextResourceContents]
