from pathlib import Path

import anyio
import pytest
import sse_starlette
from packaging import version

from bmi_health_mcp.capabilities import CapabilityCatalog, build_catalog
from bmi_health_mcp.settings import Settings

WIDGET_HTML = '<!doctype html><html><body><div id="bmi-health-calculator-root"></div></body></html>'


@pytest.fixture
def anyio_backend():
    return "asyncio"


SSE_STARLETTE_VERSION = version.parse(sse_starlette.__version__)
NEEDS_RESET = SSE_STARLETTE_VERSION < version.parse("3.0.0")


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """Reset sse-starlette's global AppStatus singleton before each test.

    AppStatus.should_exit_event is a global asyncio.Event that gets bound to
    an event loop. Versions 3.0+ use context-local events instead, so there
    is nothing to reset.
    """
    if not NEEDS_RESET:
        yield
        return

    from sse_starlette.sse import AppStatus

    AppStatus.should_exit_event = anyio.Event()  # type: ignore[attr-defined]
    yield
    AppStatus.should_exit_event = anyio.Event()  # type: ignore[attr-defined]


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    (tmp_path / "bmi-health-calculator.html").write_text(WIDGET_HTML, encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(assets_dir: Path) -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        assets_dir=assets_dir,
        widget_version="test",
        tool_timeout_seconds=2.0,
        sse_ping_interval=60,
    )


@pytest.fixture
def catalog(settings: Settings) -> CapabilityCatalog:
    return build_catalog(settings)
