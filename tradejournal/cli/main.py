"""Main CLI entry point for TradeJournal.

This module provides the main click group and lazy loading
of command modules to keep startup fast.
"""

from pathlib import Path
from typing import Optional

import click

from tradejournal.cli.common import console
from tradejournal.config import config_path, load_config, write_template
from tradejournal.log import setup_logging


class LazyGroup(click.Group):
    """A click Group whose subcommands are imported on first use.

    ``lazy_subcommands`` maps a command name to an import target of the
    form ``"package.module:attribute"``.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self._lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name in self.commands:
            return self.commands[cmd_name]
        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)
        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        import importlib

        target = self._lazy_subcommands[cmd_name]
        module_path, _, attr_name = target.partition(":")
        cmd = getattr(importlib.import_module(module_path), attr_name, None)
        if not isinstance(cmd, click.Command):
            raise click.ClickException(f"Could not load command '{cmd_name}' from {target}")

        self.add_command(cmd, cmd_name)
        return cmd


LAZY_SUBCOMMANDS = {
    # Trades
    "add": "tradejournal.cli.trade:add",
    "close": "tradejournal.cli.trade:close",
    "edit": "tradejournal.cli.trade:edit",
    "delete": "tradejournal.cli.trade:delete",
    "show": "tradejournal.cli.trade:show",
    "trades": "tradejournal.cli.trade:trades",
    # Portfolios and tags
    "portfolio": "tradejournal.cli.portfolio:portfolio",
    "tag": "tradejournal.cli.tag:tag",
    # Analytics
    "stats": "tradejournal.cli.analytics:stats",
    "equity": "tradejournal.cli.analytics:equity",
    "monthly": "tradejournal.cli.analytics:monthly",
    "daily": "tradejournal.cli.analytics:daily",
    "hours": "tradejournal.cli.analytics:hours",
    "weekdays": "tradejournal.cli.analytics:weekdays",
    "distribution": "tradejournal.cli.analytics:distribution",
    "durations": "tradejournal.cli.analytics:durations",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(package_name="tradejournal")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], verbose: bool) -> None:
    """TradeJournal - log trades, organize portfolios, review performance.

    \b
    Quick Start:
      tradejournal init                       # Write a config file
      tradejournal portfolio create Main 10000
      tradejournal add EURUSD LONG 1.0850 1.0 --exit 1.0900
      tradejournal stats                      # Win rate, profit factor, ...
    """
    ctx.ensure_object(dict)
    config = load_config(config_file)
    ctx.obj["config"] = config
    ctx.obj["config_file"] = config_file
    setup_logging("DEBUG" if verbose else config.log_level)


@cli.command()
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Write a config file with default settings."""
    path = ctx.obj.get("config_file") or config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow] (use --force to overwrite)")
        return
    write_template(path)
    console.print(f"[green]Wrote config to {path}[/green]")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
