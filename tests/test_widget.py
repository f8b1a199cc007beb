from pathlib import Path

import pytest

from bmi_health_mcp.capabilities import build_catalog
from bmi_health_mcp.exceptions import UnknownResource, UnknownTool, WidgetAssetsNotFound
from bmi_health_mcp.settings import Settings
from bmi_health_mcp.widget import WIDGET_ID, build_widget, load_widget_html, widget_meta


def test_load_prefers_exact_file(assets_dir: Path):
    (assets_dir / f"{WIDGET_ID}-0001.html").write_text("hashed", encoding="utf-8")

    assert load_widget_html(assets_dir, WIDGET_ID).startswith("<!doctype html>")


def test_load_falls_back_to_latest_hashed_build(tmp_path: Path):
    (tmp_path / f"{WIDGET_ID}-aaaa.html").write_text("old", encoding="utf-8")
    (tmp_path / f"{WIDGET_ID}-bbbb.html").write_text("new", encoding="utf-8")

    assert load_widget_html(tmp_path, WIDGET_ID) == "new"


def test_load_missing_assets(tmp_path: Path):
    with pytest.raises(WidgetAssetsNotFound):
        load_widget_html(tmp_path / "nope", WIDGET_ID)
    with pytest.raises(WidgetAssetsNotFound):
        load_widget_html(tmp_path, WIDGET_ID)


def test_template_uri_carries_version(settings: Settings):
    widget = build_widget(settings, html="<p></p>")

    assert widget.template_uri == f"ui://widget/{WIDGET_ID}.html?v=test"
    assert widget.html == "<p></p>"


def test_widget_meta_connect_domains(settings: Settings):
    settings = settings.model_copy(
        update={"public_base_url": "https://bmi.example", "widget_connect_domains": ["https://api.example"]}
    )
    meta = widget_meta(build_widget(settings, html=""), settings)

    assert meta["openai/widgetCSP"]["connect_domains"] == ["https://bmi.example", "https://api.example"]
    assert meta["openai/outputTemplate"].startswith("ui://widget/")
    assert meta["openai/widgetAccessible"] is True


def test_settings_env_conventions(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    (tmp_path / "assets").mkdir()
    monkeypatch.setenv("PORT", "9123")
    monkeypatch.setenv("ASSETS_ROOT", str(tmp_path))
    monkeypatch.setenv("RENDER_GIT_COMMIT", "0123456789abcdef0123456789abcdef01234567")
    monkeypatch.setenv("BMI_HEALTH_TOOL_TIMEOUT_SECONDS", "3.5")

    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.port == 9123
    assert settings.assets_dir == tmp_path / "assets"
    assert settings.widget_version == "0123456"
    assert settings.tool_timeout_seconds == 3.5


@pytest.mark.parametrize(
    ("commit", "version"),
    [
        ("0123456789abcdef0123456789abcdef01234567", "0123456"),
        ("deadbeefcafe", "deadbee"),
        ("v1.2.3-rc.1", "v1.2.3-"),
        ("abc", "abc"),
    ],
)
def test_render_commit_is_cut_to_seven_characters(monkeypatch: pytest.MonkeyPatch, commit: str, version: str):
    monkeypatch.setenv("RENDER_GIT_COMMIT", commit)

    assert Settings(_env_file=None).widget_version == version  # type: ignore[call-arg]


def test_catalog_lookups(settings: Settings):
    catalog = build_catalog(settings)
    entry = catalog.get_tool(WIDGET_ID)

    resource, widget = catalog.get_resource(entry.widget.template_uri)
    assert resource.mime_type == "text/html+skybridge"
    assert widget is entry.widget
    assert catalog.tool_names == frozenset({WIDGET_ID})
    assert catalog.server_info.name == "bmi-health-calculator"

    with pytest.raises(UnknownTool):
        catalog.get_tool("other")
    with pytest.raises(UnknownResource):
        catalog.get_resource("ui://widget/other.html")
    with pytest.raises(TypeError):
        catalog.tools["other"] = entry  # type: ignore[index]
