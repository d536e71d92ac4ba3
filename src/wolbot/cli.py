"""Command-line interface for wolbot."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from wolbot import __version__
from wolbot.config.loader import BotSettings

DEFAULT_CONFIG = Path.home() / ".config" / "wolbot" / "config.yaml"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every long-poll request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_settings(config: str) -> BotSettings:
    from wolbot.config.loader import ConfigError, load_config, settings_from_config

    path = Path(config)
    if not path.exists():
        click.echo(f"Config file not found: {path}", err=True)
        sys.exit(1)
    raw = load_config(path)
    if not raw:
        click.echo("Config file is empty.", err=True)
        sys.exit(1)
    try:
        return settings_from_config(raw)
    except ConfigError as exc:
        click.echo("Config validation errors:", err=True)
        for e in exc.errors:
            click.echo(f"  • {e}", err=True)
        sys.exit(1)


async def _echo_reply(text: str) -> None:
    click.echo(text)


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="wolbot")
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG),
    envvar="WOLBOT_CONFIG",
    show_default=True,
    help="Path to wolbot config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """wolbot — Wake-on-LAN over Telegram."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ── devices command ───────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def devices(ctx: click.Context) -> None:
    """List all configured devices."""
    settings = _load_settings(ctx.obj["config"])
    if not len(settings.registry):
        click.echo("No devices configured.")
        return
    click.echo(f"{'NAME':<20} {'MAC':<19} {'ADDRESS':<28} {'TIMEOUT'}")
    click.echo("─" * 76)
    for d in settings.registry:
        click.echo(f"{d.name:<20} {d.mac:<19} {d.address:<28} {d.timeout}s")


# ── wake command ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option("--no-verify", is_flag=True, help="Return right after sending the packet")
@click.pass_context
def wake(ctx: click.Context, name: str, no_verify: bool) -> None:
    """Send a Wake-on-LAN packet to NAME and report whether it comes online."""
    settings = _load_settings(ctx.obj["config"])

    from wolbot.core.orchestrator import WakeOrchestrator, WakeState

    async def _run() -> WakeState:
        orchestrator = WakeOrchestrator(settings.registry, interface=settings.interface)
        state = await orchestrator.wake(name, _echo_reply)
        if state is WakeState.VERIFYING and not no_verify:
            await orchestrator.join()
        return state

    if asyncio.run(_run()) is WakeState.FAILED:
        sys.exit(1)


# ── status command ────────────────────────────────────────────────────────────


@main.command()
@click.argument("name", required=False)
@click.pass_context
def status(ctx: click.Context, name: Optional[str]) -> None:
    """Ping NAME once, or every configured device when NAME is omitted."""
    settings = _load_settings(ctx.obj["config"])

    from wolbot.core.devices import DeviceNotFound
    from wolbot.core.probe import probe_many

    if name:
        try:
            targets = [settings.registry.lookup(name)]
        except DeviceNotFound:
            click.echo(f"Device '{name}' not found.", err=True)
            sys.exit(1)
    else:
        targets = list(settings.registry)

    results = asyncio.run(probe_many([d.address for d in targets]))
    for d in targets:
        click.echo(f"{d.name:<20} {'ONLINE' if results[d.address] else 'OFFLINE'}")


# ── run command ───────────────────────────────────────────────────────────────


@main.command()
@click.option("--token", envvar="WOLBOT_TOKEN", help="Telegram bot token")
@click.pass_context
def run(ctx: click.Context, token: Optional[str]) -> None:
    """Start the Telegram bot (long polling)."""
    settings = _load_settings(ctx.obj["config"])
    token = token or settings.token
    if not token:
        click.echo("No bot token: set WOLBOT_TOKEN or telegram.token in the config.", err=True)
        sys.exit(1)

    from wolbot.bot.commands import CommandRouter
    from wolbot.bot.telegram import TelegramBot
    from wolbot.core.orchestrator import WakeOrchestrator

    async def _serve() -> None:
        orchestrator = WakeOrchestrator(settings.registry, interface=settings.interface)
        router = CommandRouter(settings.gate, orchestrator)
        bot = TelegramBot(token, poll_timeout=settings.poll_timeout)
        try:
            await bot.run(router.handle)
        finally:
            await bot.aclose()

    click.echo(
        f"Starting wolbot with {len(settings.registry)} device(s), "
        f"{len(settings.gate)} allowed user(s)"
    )
    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        click.echo("Stopped.")


if __name__ == "__main__":
    main()
