from __future__ import annotations

import click

from dig_wallet.util.errors import WalletError


@click.group("wallet", help="Manage your wallets")
@click.pass_context
def wallet_cmd(ctx: click.Context) -> None:
    """Create, import, show, delete and prove ownership of named wallets"""
    from .wallet_funcs import keyring_from_context

    ctx.obj["keyring"] = keyring_from_context(ctx.obj)


@wallet_cmd.command("create", help="Generates a new 24 word wallet and stores it in the keyring")
@click.option("--name", "-n", default="default", help="Name of the wallet", show_default=True)
@click.pass_context
def create_cmd(ctx: click.Context, name: str) -> None:
    from .wallet_funcs import create_wallet

    try:
        create_wallet(ctx.obj["keyring"], name)
    except WalletError as e:
        raise click.ClickException(str(e)) from e


@wallet_cmd.command("import", help="Stores an existing mnemonic seed phrase in the keyring")
@click.option("--name", "-n", default="default", help="Name of the wallet", show_default=True)
@click.option("--mnemonic", "-m", prompt="Enter your mnemonic seed phrase", hide_input=True, help="24 word phrase")
@click.pass_context
def import_cmd(ctx: click.Context, name: str, mnemonic: str) -> None:
    from .wallet_funcs import import_wallet

    try:
        import_wallet(ctx.obj["keyring"], name, mnemonic)
    except WalletError as e:
        raise click.ClickException(str(e)) from e


@wallet_cmd.command("list", help="Lists the names of all stored wallets")
@click.pass_context
def list_cmd(ctx: click.Context) -> None:
    from .wallet_funcs import list_wallets

    try:
        list_wallets(ctx.obj["keyring"])
    except WalletError as e:
        raise click.ClickException(str(e)) from e


@wallet_cmd.command("show", help="Displays the keys and address of a wallet")
@click.option("--name", "-n", default="default", help="Name of the wallet", show_default=True)
@click.option(
    "--show-mnemonic-seed", help="Show the mnemonic seed of the wallet", default=False, show_default=True, is_flag=True
)
@click.option("--json", "-j", help="Displays the wallet as JSON", default=False, show_default=True, is_flag=True)
@click.pass_context
def show_cmd(ctx: click.Context, name: str, show_mnemonic_seed: bool, json: bool) -> None:
    from .wallet_funcs import network_from_context, show_wallet

    try:
        show_wallet(ctx.obj["keyring"], network_from_context(ctx.obj), name, show_mnemonic_seed, json)
    except WalletError as e:
        raise click.ClickException(str(e)) from e


@wallet_cmd.command("delete", help="Deletes a wallet from the keyring")
@click.option("--name", "-n", required=True, help="Name of the wallet")
@click.pass_context
def delete_cmd(ctx: click.Context, name: str) -> None:
    from .wallet_funcs import delete_wallet

    try:
        delete_wallet(ctx.obj["keyring"], name)
    except WalletError as e:
        raise click.ClickException(str(e)) from e


@wallet_cmd.command("sign", help="Signs a nonce to prove ownership of a wallet's synthetic key")
@click.option("--name", "-n", default="default", help="Name of the wallet", show_default=True)
@click.option("--nonce", required=True, help="Nonce supplied by the verifier")
@click.pass_context
def sign_cmd(ctx: click.Context, name: str, nonce: str) -> None:
    from .wallet_funcs import sign_ownership

    try:
        sign_ownership(ctx.obj["keyring"], name, nonce)
    except WalletError as e:
        raise click.ClickException(str(e)) from e


@wallet_cmd.command("verify", help="Verifies a key ownership signature")
@click.option("--nonce", required=True, help="Nonce that was signed")
@click.option("--signature", "-s", required=True, help="Signature in hex")
@click.option("--public-key", "-k", required=True, help="Synthetic public key in hex")
@click.pass_context
def verify_cmd(ctx: click.Context, nonce: str, signature: str, public_key: str) -> None:
    from .wallet_funcs import verify_ownership

    try:
        valid = verify_ownership(nonce, signature, public_key)
    except WalletError as e:
        raise click.ClickException(str(e)) from e
    if not valid:
        ctx.exit(1)
