from __future__ import annotations

import asyncio
import json
from typing import Any, Dict

import click

from dig_wallet.util.config import NetworkConstants, get_network_constants
from dig_wallet.util.file_keyring import FileKeyring
from dig_wallet.wallet.wallet import Wallet


def keyring_from_context(ctx_obj: Dict[str, Any]) -> FileKeyring:
    return FileKeyring.from_config(ctx_obj["root_path"], ctx_obj["config"], ctx_obj.get("keyring_path"))


def network_from_context(ctx_obj: Dict[str, Any]) -> NetworkConstants:
    try:
        return get_network_constants(ctx_obj["config"], ctx_obj.get("network"))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--network") from e


def create_wallet(keyring: FileKeyring, name: str) -> None:
    mnemonic = asyncio.run(Wallet.create_new_wallet(name, keyring))
    print(f"Created wallet {name!r}")
    print("Write down your mnemonic seed phrase, it is the only way to recover this wallet:")
    print(mnemonic)


def import_wallet(keyring: FileKeyring, name: str, mnemonic: str) -> None:
    asyncio.run(Wallet.import_wallet(name, mnemonic, keyring))
    print(f"Imported wallet {name!r}")


def list_wallets(keyring: FileKeyring) -> None:
    names = asyncio.run(Wallet.list_wallets(keyring))
    if len(names) == 0:
        print("There are no saved wallets")
        return
    for name in names:
        print(name)


def show_wallet(
    keyring: FileKeyring, constants: NetworkConstants, name: str, show_mnemonic: bool, as_json: bool
) -> None:
    wallet = asyncio.run(Wallet.load(name, create_on_undefined=False, keyring=keyring, constants=constants))
    wallet_info: Dict[str, Any] = {
        "name": wallet.wallet_name,
        "fingerprint": int(wallet.get_fingerprint()),
        "synthetic_public_key": bytes(wallet.get_public_synthetic_key()).hex(),
        "puzzle_hash": "0x" + wallet.get_owner_puzzle_hash().hex(),
        "address": wallet.get_owner_public_key(),
        "network": constants.name,
    }
    if show_mnemonic:
        wallet_info["mnemonic"] = wallet.get_mnemonic()

    if as_json:
        print(json.dumps(wallet_info, indent=4))
        return

    print(f"Wallet: {wallet_info['name']}")
    print(f"Fingerprint: {wallet_info['fingerprint']}")
    print(f"Synthetic public key (m/12381/8444/2/0): {wallet_info['synthetic_public_key']}")
    print(f"Puzzle hash: {wallet_info['puzzle_hash']}")
    print(f"Address ({constants.name}): {wallet_info['address']}")
    if show_mnemonic:
        print("Mnemonic seed (24 secret words):")
        print(wallet_info["mnemonic"])


def delete_wallet(keyring: FileKeyring, name: str) -> None:
    if asyncio.run(Wallet.delete_wallet(name, keyring)):
        print(f"Deleted wallet {name!r}")
    else:
        print(f"No wallet named {name!r}")


def sign_ownership(keyring: FileKeyring, name: str, nonce: str) -> None:
    wallet = asyncio.run(Wallet.load(name, create_on_undefined=False, keyring=keyring))
    print(f"Public key: {bytes(wallet.get_public_synthetic_key()).hex()}")
    print(f"Signature: {wallet.create_key_ownership_signature(nonce)}")


def verify_ownership(nonce: str, signature: str, public_key: str) -> bool:
    valid = Wallet.verify_key_ownership_signature(nonce, signature, public_key)
    print("Signature is valid" if valid else "Signature is NOT valid")
    return valid
