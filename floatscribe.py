#!/usr/bin/env python3
"""
CLI-Einstiegspunkt für FloatScribe.

Treibt denselben Controller wie das schwebende Widget: Aufnahme per
Enter starten/stoppen, Transkript auf stdout, Status und Pegel auf stderr.

Usage:
    floatscribe record
    floatscribe record --rephrase --language nl
    floatscribe rephrase "ähm also der Termin ist morgen"
    floatscribe settings --api-key sk-...
    floatscribe check-key
"""

import asyncio
import logging
import sys
from typing import Annotated

import typer

from cli.types import Language
from controller import FloatScribeController
from errors import AuthError, FloatScribeError
from utils.env import load_environment
from utils.logging import error, get_session_id, log, mask_secret, setup_logging
from utils.preferences import Settings, load_settings, save_settings
from utils.state import AppEvent, MessageType

# Typer-App
app = typer.Typer(
    help="Diktieren mit OpenAI Whisper, optional umformuliert",
    add_completion=False,
)

logger = logging.getLogger("floatscribe")

LEVEL_METER_WIDTH = 30


def _bootstrap(debug: bool) -> None:
    load_environment()
    setup_logging(debug=debug)


def _render_level(level: float) -> str:
    """Pegelbalken für stderr, z.B. '[#######        ]  23%'."""
    filled = round(level / 100 * LEVEL_METER_WIDTH)
    return f"[{'#' * filled}{' ' * (LEVEL_METER_WIDTH - filled)}] {level:3.0f}%"


def _print_event(event: AppEvent) -> None:
    if event.type is MessageType.AUDIO_LEVEL:
        sys.stderr.write("\r" + _render_level(event.payload.level))
        sys.stderr.flush()


def _fail(err: Exception) -> None:
    error(str(err))
    if isinstance(err, AuthError):
        log("Hinweis: API-Key setzen mit `floatscribe settings --api-key sk-...`")
    raise typer.Exit(1)


async def _record_interactive(controller: FloatScribeController, rephrase: bool) -> str:
    log("🎤 Drücke ENTER um die Aufnahme zu starten...")
    await asyncio.to_thread(input)

    unsubscribe = controller.subscribe(_print_event)
    try:
        await controller.start_recording()
        log("🔴 Aufnahme läuft... Drücke ENTER zum Beenden.")
        await asyncio.to_thread(input)
        sys.stderr.write("\n")
        text = await controller.stop_recording()
    finally:
        unsubscribe()
        # Abbruch per Ctrl+C/EOF: Mikrofon nicht belegt lassen
        await controller.cancel_recording()

    log("✅ Aufnahme beendet.")
    if rephrase:
        text = await controller.rephrase_text(text)
    return text


@app.command()
def record(
    rephrase: Annotated[
        bool,
        typer.Option(help="Transkript anschließend umformulieren"),
    ] = False,
    language: Annotated[
        Language | None,
        typer.Option(
            help="Sprachcode (überschreibt die Einstellungen)",
            envvar="FLOATSCRIBE_LANGUAGE",
        ),
    ] = None,
    debug: Annotated[bool, typer.Option(help="Debug-Logging aktivieren")] = False,
) -> None:
    """Vom Mikrofon aufnehmen und transkribieren."""
    _bootstrap(debug)

    def settings_snapshot() -> Settings:
        return load_settings().with_updates(
            language=language.value if language else None
        )

    controller = FloatScribeController(settings_loader=settings_snapshot)
    try:
        text = asyncio.run(_record_interactive(controller, rephrase))
    except FloatScribeError as e:
        _fail(e)

    print(text)
    logger.info(f"[{get_session_id()}] ✓ Pipeline: {len(text)} Zeichen")


@app.command()
def rephrase(
    text: Annotated[str, typer.Argument(help="Umzuformulierender Text")],
    debug: Annotated[bool, typer.Option(help="Debug-Logging aktivieren")] = False,
) -> None:
    """Text mit dem konfigurierten Modell und Prompt umformulieren."""
    _bootstrap(debug)
    controller = FloatScribeController()
    try:
        result = asyncio.run(controller.rephrase_text(text))
    except FloatScribeError as e:
        _fail(e)
    print(result)


@app.command()
def settings(
    api_key: Annotated[str | None, typer.Option(help="OpenAI API-Key")] = None,
    language: Annotated[Language | None, typer.Option(help="Sprachcode")] = None,
    model: Annotated[
        str | None, typer.Option(help="Modell für die Umformulierung")
    ] = None,
    prompt: Annotated[
        str | None, typer.Option(help="Anweisung für die Umformulierung")
    ] = None,
) -> None:
    """Einstellungen anzeigen oder ändern."""
    load_environment()
    current = load_settings()
    updated = current.with_updates(
        api_key=api_key.strip() if api_key else None,
        language=language.value if language else None,
        rephrase_model=model,
        rephrase_prompt=prompt,
    )
    if updated != current:
        save_settings(updated)
        log("✅ Einstellungen gespeichert")

    print(f"api_key:         {mask_secret(updated.api_key)}")
    print(f"language:        {updated.language}")
    print(f"rephrase_model:  {updated.rephrase_model}")
    print(f"rephrase_prompt: {updated.rephrase_prompt}")


@app.command("check-key")
def check_key(
    key: Annotated[
        str | None,
        typer.Argument(help="Zu prüfender Key (default: gespeicherter Key)"),
    ] = None,
) -> None:
    """Prüft, ob der API-Key von OpenAI akzeptiert wird."""
    load_environment()
    controller = FloatScribeController()
    api_key = key or controller.get_settings().api_key
    try:
        valid = asyncio.run(controller.test_api_key(api_key))
    except FloatScribeError as e:
        _fail(e)

    if not valid:
        error("API-Key ungültig")
        raise typer.Exit(1)
    log("✅ API-Key ist gültig")


if __name__ == "__main__":
    app()
