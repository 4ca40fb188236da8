"""CLI entry point for montoggle."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import click

from .actions import ModeActions
from .audio import VOLUME_STEP, AudioProfile, PactlAudio
from .config import AUDIO_CARD_ENV, EXTERNAL_ENV, INTERNAL_ENV, ConfigError, Settings
from .inference import round_robin
from .models import Mode, Resolution
from .query import OutputQuery
from .ui import DesktopUI
from .xrandr import BackendError, XrandrBackend, parse_listing

log = logging.getLogger(__name__)


class ResolutionType(click.ParamType):
    name = "WxH"

    def convert(self, value, param, ctx) -> Resolution:
        if isinstance(value, Resolution):
            return value
        try:
            return Resolution.parse(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


RESOLUTION = ResolutionType()


def _configure_logging(verbose: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [montoggle] %(levelname)s %(message)s",
    )


@contextmanager
def _backend_errors() -> Iterator[None]:
    """Turn a failed backend call into a non-zero exit."""
    try:
        yield
    except BackendError as e:
        log.error("Display backend failed: %s", e)
        raise click.ClickException(str(e)) from e


def _actions(ctx: click.Context) -> ModeActions:
    """Take a fresh snapshot and resolve output roles."""
    obj = ctx.obj
    settings: Settings = obj["settings"]
    backend = obj["backend"]
    query = OutputQuery(parse_listing(backend.query()))
    roles = query.resolve_roles(settings.internal, settings.external)
    return ModeActions(backend, obj["ui"], query, roles)


def _switch(ctx: click.Context, mode: Mode, resolution: Resolution | None) -> None:
    with _backend_errors():
        _actions(ctx).apply(mode, resolution)


@click.group(invoke_without_command=True)
@click.option("--internal", envvar=INTERNAL_ENV, show_envvar=True, default="",
              help="Internal (laptop panel) output, e.g. eDP1.")
@click.option("--external", envvar=EXTERNAL_ENV, show_envvar=True, default="",
              help="External output; auto-detected when empty.")
@click.option("--audio-card", envvar=AUDIO_CARD_ENV, show_envvar=True, default="0",
              help="pactl card used for audio profile switching.")
@click.option("--dry-run", "-n", is_flag=True, help="Print commands instead of running them.")
@click.option("--verbose", "-v", count=True, help="-v for info, -vv for debug logging.")
@click.pass_context
def cli(ctx: click.Context, internal: str, external: str, audio_card: str,
        dry_run: bool, verbose: int) -> None:
    """montoggle - switch between internal, external, clone and presentation display modes."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ui = ctx.obj.setdefault("ui", DesktopUI())

    try:
        settings = Settings(
            internal=internal, external=external, audio_card=audio_card,
        )
    except ConfigError as e:
        ui.notify(f"Configuration error: {e}")
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)

    ctx.obj["settings"] = settings
    ctx.obj.setdefault("backend", XrandrBackend(dry_run=dry_run))
    ctx.obj.setdefault("audio", PactlAudio(settings.audio_card, dry_run=dry_run))

    if ctx.invoked_subcommand is None:
        _interactive(ctx)


def _interactive(ctx: click.Context) -> None:
    settings: Settings = ctx.obj["settings"]
    if settings.external_configured:
        click.echo(
            f"Error: {EXTERNAL_ENV} is set ({settings.external}); "
            "a subcommand is required (see --help).",
            err=True,
        )
        ctx.exit(2)

    modes = {m.label: m for m in Mode}
    choice = ctx.obj["ui"].select(list(modes), "Display mode")
    if choice is None:
        log.info("Selection cancelled")
        return
    _switch(ctx, modes[choice], None)


# ── Display modes ────────────────────────────────────────────────────────

@cli.command("edp")
@click.argument("resolution", type=RESOLUTION, required=False)
@click.pass_context
def edp(ctx: click.Context, resolution: Resolution | None) -> None:
    """Internal display only."""
    _switch(ctx, Mode.INTERNAL_ONLY, resolution)


@cli.command("hdmi")
@click.argument("resolution", type=RESOLUTION, required=False)
@click.pass_context
def hdmi(ctx: click.Context, resolution: Resolution | None) -> None:
    """External display only."""
    _switch(ctx, Mode.EXTERNAL_ONLY, resolution)


@cli.command("clone_edp")
@click.argument("resolution", type=RESOLUTION, required=False)
@click.pass_context
def clone_edp(ctx: click.Context, resolution: Resolution | None) -> None:
    """Mirror at the internal display's resolution."""
    _switch(ctx, Mode.CLONE_TOWARD_INTERNAL, resolution)


@cli.command("clone_hdmi")
@click.argument("resolution", type=RESOLUTION, required=False)
@click.pass_context
def clone_hdmi(ctx: click.Context, resolution: Resolution | None) -> None:
    """Mirror at the external display's resolution."""
    _switch(ctx, Mode.CLONE_TOWARD_EXTERNAL, resolution)


@cli.command("present")
@click.argument("resolution", type=RESOLUTION, required=False)
@click.pass_context
def present(ctx: click.Context, resolution: Resolution | None) -> None:
    """External display to the right of the internal one."""
    _switch(ctx, Mode.PRESENTATION, resolution)


@cli.command("automon")
@click.argument("resolution", type=RESOLUTION, required=False)
@click.pass_context
def automon(ctx: click.Context, resolution: Resolution | None) -> None:
    """External only when one is connected, otherwise internal only."""
    with _backend_errors():
        actions = _actions(ctx)
        if actions.query.external_available(actions.roles):
            actions.external_only(resolution)
        else:
            actions.internal_only(resolution)


@cli.command("round_robin")
@click.argument("resolution", type=RESOLUTION, required=False)
@click.pass_context
def round_robin_cmd(ctx: click.Context, resolution: Resolution | None) -> None:
    """Switch to the next mode in the cycle."""
    with _backend_errors():
        round_robin(_actions(ctx), resolution)


# ── Queries ──────────────────────────────────────────────────────────────

@cli.command("pref_res")
@click.argument("output", required=False)
@click.pass_context
def pref_res(ctx: click.Context, output: str | None) -> None:
    """Print the preferred resolution of OUTPUT (default: internal)."""
    with _backend_errors():
        actions = _actions(ctx)
    res = actions.query.preferred_resolution(output or actions.roles.internal)
    if res is None:
        click.echo("no preferred resolution", err=True)
        ctx.exit(1)
    click.echo(str(res))


@cli.command("is_active")
@click.argument("output", required=False)
@click.pass_context
def is_active(ctx: click.Context, output: str | None) -> None:
    """Print whether OUTPUT (default: internal) is active; exit 1 if not."""
    with _backend_errors():
        actions = _actions(ctx)
    active = actions.query.is_active(output or actions.roles.internal)
    click.echo("true" if active else "false")
    ctx.exit(0 if active else 1)


@cli.command("detect_external")
@click.pass_context
def detect_external(ctx: click.Context) -> None:
    """Print the first connected output that is not the internal one."""
    settings: Settings = ctx.obj["settings"]
    with _backend_errors():
        actions = _actions(ctx)
    external = actions.query.resolve_external(settings.internal)
    if external is None:
        ctx.exit(1)
    click.echo(external)


# ── Audio ────────────────────────────────────────────────────────────────

def _audio_profile(ctx: click.Context, profile: AudioProfile, label: str) -> None:
    if ctx.obj["audio"].set_profile(profile):
        ctx.obj["ui"].notify(f"Audio: {label}")


@cli.command("audio_hdmi")
@click.pass_context
def audio_hdmi(ctx: click.Context) -> None:
    """Route audio to the external display."""
    _audio_profile(ctx, AudioProfile.HDMI, "external display")


@cli.command("audio_analog")
@click.pass_context
def audio_analog(ctx: click.Context) -> None:
    """Route audio to the built-in speakers / headphone jack."""
    _audio_profile(ctx, AudioProfile.ANALOG, "built-in")


@cli.command("audio_off")
@click.pass_context
def audio_off(ctx: click.Context) -> None:
    """Switch the audio card off."""
    _audio_profile(ctx, AudioProfile.OFF, "off")


@cli.command("vol_up")
@click.pass_context
def vol_up(ctx: click.Context) -> None:
    """Raise the default sink volume."""
    ctx.obj["audio"].change_volume(VOLUME_STEP)


@cli.command("vol_down")
@click.pass_context
def vol_down(ctx: click.Context) -> None:
    """Lower the default sink volume."""
    ctx.obj["audio"].change_volume(-VOLUME_STEP)


if __name__ == "__main__":
    cli()
