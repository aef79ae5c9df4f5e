from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from dig_wallet import __version__
from dig_wallet.cmds.wallet import wallet_cmd
from dig_wallet.util.config import load_config
from dig_wallet.util.default_root import DEFAULT_ROOT_PATH
from dig_wallet.util.dig_logging import initialize_logging

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(
    help=f"\n  Manage DIG wallets ({__version__})\n",
    epilog="Try 'dig-wallet wallet create' or 'dig-wallet wallet show'",
    context_settings=CONTEXT_SETTINGS,
)
@click.option("--root-path", default=DEFAULT_ROOT_PATH, help="Config file root", type=click.Path(), show_default=True)
@click.option("--keyring-path", default=None, help="Keyring file, overrides <root>/keyring.json", type=click.Path())
@click.option("--network", default=None, help="Network to use instead of selected_network from config", type=str)
@click.pass_context
def cli(ctx: click.Context, root_path: str, keyring_path: Optional[str], network: Optional[str]) -> None:
    ctx.ensure_object(dict)
    ctx.obj["root_path"] = Path(root_path)
    ctx.obj["keyring_path"] = None if keyring_path is None else Path(keyring_path)
    ctx.obj["network"] = network
    config = load_config(ctx.obj["root_path"])
    ctx.obj["config"] = config
    initialize_logging("dig_wallet", config["logging"], ctx.obj["root_path"])


@cli.command("version", help="Show dig-wallet version")
def version_cmd() -> None:
    print(__version__)


cli.add_command(wallet_cmd)


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
