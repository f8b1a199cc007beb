"""The embedded calculator widget: its descriptor, HTML and presentation metadata."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from bmi_health_mcp.exceptions import WidgetAssetsNotFound
from bmi_health_mcp.settings import Settings

logger = logging.getLogger(__name__)

WIDGET_ID: Final[str] = "bmi-health-calculator"
WIDGET_MIME_TYPE: Final[str] = "text/html+skybridge"
WIDGET_DOMAIN: Final[str] = "https://chatgpt.com"

# Fallback cache-buster when no deploy version is configured
_PROCESS_START_VERSION: Final[str] = str(int(time.time() * 1000))


@dataclass(frozen=True)
class HealthWidget:
    id: str
    title: str
    template_uri: str
    invoking: str
    invoked: str
    html: str


def load_widget_html(assets_dir: Path, component: str) -> str:
    """Read ``<component>.html``, else the newest hashed ``<component>-*.html`` build."""
    if not assets_dir.is_dir():
        raise WidgetAssetsNotFound(
            f"Widget assets not found. Expected directory {assets_dir}. Build the widget before starting the server."
        )

    direct = assets_dir / f"{component}.html"
    if direct.is_file():
        path = direct
    else:
        candidates = sorted(assets_dir.glob(f"{component}-*.html"))
        if not candidates:
            raise WidgetAssetsNotFound(f'Widget HTML for "{component}" not found in {assets_dir}.')
        path = candidates[-1]

    html = path.read_text(encoding="utf-8")
    logger.info("Loaded widget %s from %s (%d bytes)", component, path, len(html))
    return html


def build_widget(settings: Settings, html: str | None = None) -> HealthWidget:
    version = settings.widget_version or _PROCESS_START_VERSION
    return HealthWidget(
        id=WIDGET_ID,
        title="BMI Health Calculator - analyze body mass index and health",
        template_uri=f"ui://widget/{WIDGET_ID}.html?v={version}",
        invoking="Opening the BMI Health Calculator...",
        invoked="Here is the BMI Health Calculator. You can enter your height and weight.",
        html=html if html is not None else load_widget_html(settings.assets_dir, WIDGET_ID),
    )


def widget_meta(widget: HealthWidget, settings: Settings) -> dict[str, Any]:
    """Presentation metadata attached to the tool, its resource and every tool result."""
    connect_domains = [settings.public_base_url, *settings.widget_connect_domains]
    return {
        "openai/outputTemplate": widget.template_uri,
        "openai/widgetDescription": (
            "A comprehensive health calculator for BMI, Ideal Weight, Body Fat Percentage, and Calorie Needs."
        ),
        "openai/componentDescriptions": {
            "metrics-form": "Input form for height, weight, age, gender, and other body measurements.",
            "bmi-card": "Card displaying the calculated Body Mass Index and health category.",
            "ideal-weight-card": "Card showing the estimated ideal weight range based on height and gender.",
            "body-fat-card": "Card showing estimated body fat percentage using the US Navy method.",
            "calorie-card": "Card showing daily calorie needs (TDEE) based on activity level.",
        },
        "openai/widgetKeywords": [
            "bmi",
            "body fat",
            "ideal weight",
            "calories",
            "tdee",
            "health calculator",
            "weight loss",
            "fitness",
            "diet",
        ],
        "openai/sampleConversations": [
            {
                "user": "Calculate my BMI, I am 180cm and 75kg.",
                "assistant": "I can help with that. Here is your BMI calculation.",
            },
            {
                "user": "What is my ideal weight if I'm 5'6\" female?",
                "assistant": "I've estimated your ideal weight range based on your height and gender.",
            },
            {
                "user": "Estimate body fat for 30yo male, waist 90cm, neck 38cm, height 178cm.",
                "assistant": "Using the US Navy method, here is your estimated body fat percentage.",
            },
            {
                "user": "How many calories should I eat to lose weight? I'm active.",
                "assistant": "I can calculate your daily calorie needs based on your activity level.",
            },
        ],
        "openai/starterPrompts": [
            "Calculate BMI",
            "Ideal Weight",
            "Body Fat Calculator",
            "Calorie Calculator",
            "Am I overweight?",
        ],
        "openai/widgetPrefersBorder": True,
        "openai/widgetCSP": {
            "connect_domains": connect_domains,
            "resource_domains": [],
        },
        "openai/widgetDomain": WIDGET_DOMAIN,
        "openai/toolInvocation/invoking": widget.invoking,
        "openai/toolInvocation/invoked": widget.invoked,
        "openai/widgetAccessible": True,
        "openai/resultCanProduceWidget": True,
    }
