"""vidigenius CLI entrypoint."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict, NoReturn, Optional, Tuple

import typer

from .analysis.gateway import GeminiAnalysisGateway
from .analysis.models import AnalysisResult
from .backends.gemini import GeminiClient
from .errors import ConfigurationError, VidiGeniusError
from .render.report import render_text, report_payload, save_thumbnail, thumbnail_filename
from .session.controller import SessionController
from .session.state import Phase, UploadedVideo
from .settings import Settings, get_settings
from .thumbnail.gateway import AspectRatio, GeminiThumbnailGateway
from .util.logging import emit_event, get_logger, set_level

app = typer.Typer(add_completion=False, help="Analyze a short video and generate titles, captions and a thumbnail.")
logger = get_logger(__name__)


def require_api_key(settings: Settings) -> str:
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY is not set. Add it to the environment or a .env file.")
    return settings.gemini_api_key


def instantiate_gateways(settings: Settings) -> Tuple[GeminiAnalysisGateway, GeminiThumbnailGateway]:
    """Build both gateways on one Gemini client using credentials from settings."""
    client = GeminiClient(require_api_key(settings))
    return (
        GeminiAnalysisGateway(client, model=settings.analysis_model, timeout=settings.analysis_timeout_s),
        GeminiThumbnailGateway(client, model=settings.image_model, timeout=settings.image_timeout_s),
    )


def _configure_logging(verbose: bool, settings: Settings) -> None:
    if verbose:
        set_level("DEBUG")
    elif settings.vidigenius_log_level:
        set_level(settings.vidigenius_log_level)


def _fail(message: str) -> NoReturn:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _save(image: str, path: Path) -> Path:
    try:
        return save_thumbnail(image, path)
    except ValueError as exc:
        _fail(f"Cannot save thumbnail to {path}: {exc}")


@app.command()
def analyze(
    input: Path = typer.Option(..., "--input", exists=True, dir_okay=False, readable=True),
    output_dir: Path = typer.Option(Path("./out"), "--output_dir", file_okay=False),
    aspect: AspectRatio = typer.Option(AspectRatio.PORTRAIT_9x16, "--aspect", help="Thumbnail aspect ratio"),
    also_aspect: Optional[AspectRatio] = typer.Option(
        None, "--also-aspect", help="Regenerate the thumbnail in this ratio once the run completes"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON report instead of text"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Upload a video, analyze it and render a thumbnail."""
    settings = get_settings()
    _configure_logging(verbose, settings)

    try:
        controller = SessionController(*instantiate_gateways(settings))
        controller.select_aspect_ratio(aspect)
        state = controller.upload_and_analyze(UploadedVideo.from_path(input))
    except VidiGeniusError as exc:
        logger.exception("Pipeline error")
        _fail(f"Pipeline failed: {exc}")

    if state.phase is Phase.IDLE:
        _fail(state.error_message or "Upload was not accepted.")
    if state.phase is Phase.ERROR:
        _fail(f"Pipeline failed: {state.error_message}")

    output_dir.mkdir(parents=True, exist_ok=True)
    thumbnails: Dict[str, Path] = {}
    if state.thumbnail_image:
        path = output_dir / thumbnail_filename(state.aspect_ratio)
        thumbnails[state.aspect_ratio.value] = _save(state.thumbnail_image, path)

    if also_aspect is not None and also_aspect is not state.aspect_ratio:
        issued = controller.regenerate_thumbnail(also_aspect)
        failure = controller.last_regeneration_failure
        state = controller.snapshot()
        if issued and failure is None and state.thumbnail_image:
            path = output_dir / thumbnail_filename(also_aspect)
            thumbnails[also_aspect.value] = _save(state.thumbnail_image, path)
        else:
            reason = f": {failure}" if failure else "."
            typer.secho(
                f"Could not regenerate the thumbnail in {also_aspect.value}{reason}", err=True, fg=typer.colors.YELLOW
            )

    payload = report_payload(state, thumbnails)
    report_path = output_dir / "report.json"
    report_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    emit_event(logger, "report.saved", path=report_path, thumbnails=len(thumbnails))

    if as_json:
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        typer.echo(render_text(state))
        typer.secho(f"Results written to {output_dir}", fg=typer.colors.GREEN)


@app.command()
def thumbnail(
    report: Path = typer.Option(..., "--report", exists=True, dir_okay=False, readable=True),
    aspect: AspectRatio = typer.Option(..., "--aspect", help="Thumbnail aspect ratio"),
    output_dir: Optional[Path] = typer.Option(None, "--output_dir", file_okay=False),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Render the thumbnail concept of a saved report in another aspect ratio."""
    settings = get_settings()
    _configure_logging(verbose, settings)

    try:
        data = json.loads(report.read_text(encoding="utf-8"))
        analysis = AnalysisResult.model_validate(data["analysis"])
    except (ValueError, KeyError, TypeError) as exc:
        _fail(f"Cannot read analysis from {report}: {exc}")

    try:
        _, thumbnail_gateway = instantiate_gateways(settings)
        image = thumbnail_gateway.generate(analysis.thumbnail_concept.prompt, aspect)
    except VidiGeniusError as exc:
        logger.exception("Thumbnail error")
        _fail(f"Thumbnail generation failed: {exc}")

    target_dir = output_dir or report.parent
    path = _save(image, target_dir / thumbnail_filename(aspect))
    typer.secho(f"Thumbnail written to {path}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    sys.exit(app())
