"""Static capability tables shared by every session.

The catalog is built once when the application starts and never mutated
afterwards, so sessions read it concurrently without locking or copying.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

from bmi_health_mcp.exceptions import UnknownResource, UnknownTool
from bmi_health_mcp.settings import Settings
from bmi_health_mcp.types import (
    Implementation,
    Resource,
    ResourceTemplate,
    ServerCapabilities,
    Tool,
    ToolAnnotations,
)
from bmi_health_mcp.widget import WIDGET_MIME_TYPE, HealthWidget, build_widget, widget_meta

SERVER_NAME: Final[str] = "bmi-health-calculator"
SERVER_VERSION: Final[str] = "0.1.0"

ACTIVITY_LEVELS: Final[list[str]] = ["sedentary", "light", "moderate", "active", "very_active", "extra_active"]

TOOL_INPUT_SCHEMA: Final[dict[str, Any]] = {
    "type": "object",
    "properties": {
        "height_cm": {"type": "number", "description": "Height in centimeters."},
        "weight_kg": {"type": "number", "description": "Weight in kilograms."},
        "age_years": {"type": "number", "description": "Age in years."},
        "gender": {
            "type": "string",
            "enum": ["male", "female"],
            "description": "Biological sex for formula selection.",
        },
        "waist_cm": {"type": "number", "description": "Waist circumference in cm (for body fat)."},
        "hip_cm": {"type": "number", "description": "Hip circumference in cm (for body fat, female)."},
        "neck_cm": {"type": "number", "description": "Neck circumference in cm (for body fat)."},
        "activity_level": {
            "type": "string",
            "enum": ACTIVITY_LEVELS,
            "description": "Activity level for TDEE calculation.",
        },
    },
    "required": [],
    "additionalProperties": False,
}

TOOL_OUTPUT_SCHEMA: Final[dict[str, Any]] = {
    "type": "object",
    "properties": {
        "ready": {"type": "boolean"},
        "timestamp": {"type": "string"},
        "height_cm": {"type": "number"},
        "weight_kg": {"type": "number"},
        "age_years": {"type": "number"},
        "gender": {"type": "string"},
        "activity_level": {"type": "string"},
        "summary": {
            "type": "object",
            "properties": {
                "bmi": {"type": ["number", "null"]},
                "bmi_category": {"type": ["string", "null"]},
                "ideal_weight_min": {"type": ["number", "null"]},
                "ideal_weight_max": {"type": ["number", "null"]},
                "body_fat_pct": {"type": ["number", "null"]},
                "tdee_calories": {"type": ["number", "null"]},
            },
        },
        "suggested_followups": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
}

TOOL_DESCRIPTION: Final[str] = (
    "Use this for BMI, Ideal Weight, and Body Fat analysis. "
    "It calculates health metrics based on height, weight, and other inputs."
)

SUGGESTED_FOLLOWUPS: Final[tuple[str, ...]] = (
    "How much weight should I lose?",
    "What is a healthy BMI range?",
    "Calculate body fat percentage",
    "What is my TDEE?",
)

NOAUTH: Final[list[dict[str, Any]]] = [{"type": "noauth"}]


@dataclass(frozen=True)
class ToolEntry:
    """A tool descriptor paired with the widget that renders its results."""

    tool: Tool
    widget: HealthWidget
    presentation: Mapping[str, Any]


@dataclass(frozen=True)
class CapabilityCatalog:
    server_info: Implementation
    capabilities: ServerCapabilities
    tools: Mapping[str, ToolEntry]
    resources: Mapping[str, Resource]
    resource_templates: tuple[ResourceTemplate, ...]
    widgets: Mapping[str, HealthWidget] = field(default_factory=dict)

    @property
    def tool_names(self) -> frozenset[str]:
        return frozenset(self.tools)

    def get_tool(self, name: str) -> ToolEntry:
        try:
            return self.tools[name]
        except KeyError:
            raise UnknownTool(name) from None

    def get_resource(self, uri: str) -> tuple[Resource, HealthWidget]:
        try:
            return self.resources[uri], self.widgets[uri]
        except KeyError:
            raise UnknownResource(uri) from None


def build_catalog(settings: Settings, widgets: list[HealthWidget] | None = None) -> CapabilityCatalog:
    """Build the process-wide catalog. Loads widget HTML unless widgets are given."""
    if widgets is None:
        widgets = [build_widget(settings)]

    tools: dict[str, ToolEntry] = {}
    resources: dict[str, Resource] = {}
    templates: list[ResourceTemplate] = []
    widgets_by_uri: dict[str, HealthWidget] = {}

    for widget in widgets:
        meta = widget_meta(widget, settings)
        tools[widget.id] = ToolEntry(
            tool=Tool(
                name=widget.id,
                title=widget.title,
                description=TOOL_DESCRIPTION,
                input_schema=TOOL_INPUT_SCHEMA,
                output_schema=TOOL_OUTPUT_SCHEMA,
                security_schemes=NOAUTH,
                annotations=ToolAnnotations(destructive_hint=False, open_world_hint=False, read_only_hint=True),
                meta={**meta, "securitySchemes": NOAUTH},
            ),
            widget=widget,
            presentation=MappingProxyType(meta),
        )
        resources[widget.template_uri] = Resource(
            uri=widget.template_uri,
            name=widget.title,
            description="HTML template for the BMI, Fitness, Calorie, and Body Fat Health Calculator widget.",
            mime_type=WIDGET_MIME_TYPE,
            meta=meta,
        )
        templates.append(
            ResourceTemplate(
                uri_template=widget.template_uri,
                name=widget.title,
                description="Template descriptor for the BMI, Fitness, Calorie, and Body Fat Health Calculator widget.",
                mime_type=WIDGET_MIME_TYPE,
                meta=meta,
            )
        )
        widgets_by_uri[widget.template_uri] = widget

    return CapabilityCatalog(
        server_info=Implementation(
            name=SERVER_NAME,
            version=SERVER_VERSION,
            description="BMI Health Calculator is a comprehensive app for analyzing health metrics.",
        ),
        capabilities=ServerCapabilities(resources={}, tools={}),
        tools=MappingProxyType(tools),
        resources=MappingProxyType(resources),
        resource_templates=tuple(templates),
        widgets=MappingProxyType(widgets_by_uri),
    )
