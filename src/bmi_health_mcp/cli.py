from pathlib import Path

import click
import uvicorn

from bmi_health_mcp.exceptions import WidgetAssetsNotFound
from bmi_health_mcp.server.app import create_app
from bmi_health_mcp.settings import Settings
from bmi_health_mcp.utilities.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.command()
@click.option("--host", default=None, help="Interface to bind (default: settings host)")
@click.option("--port", type=int, default=None, help="Port to listen on for SSE (default: settings port)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level",
)
@click.option(
    "--assets-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the built widget HTML",
)
def main(host: str | None, port: int | None, log_level: str | None, assets_dir: Path | None) -> int:
    overrides = {
        key: value
        for key, value in {"host": host, "port": port, "log_level": log_level and log_level.upper()}.items()
        if value is not None
    }
    if assets_dir is not None:
        overrides["assets_dir"] = assets_dir
    settings = Settings(**overrides)
    configure_logging(settings.log_level)

    try:
        app = create_app(settings)
    except WidgetAssetsNotFound as e:
        raise click.ClickException(str(e)) from e

    logger.info("BMI Health Calculator listening on http://%s:%d%s", settings.host, settings.port, settings.sse_path)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0
