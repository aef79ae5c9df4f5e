from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, List

import anyio
import pytest
import yaml
from click.testing import CliRunner, Result

from dig_wallet.cmds.dig import cli
from dig_wallet.util.errors import CryptoError
from dig_wallet.util.file_keyring import FileKeyring
from dig_wallet.wallet.wallet import Wallet


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)


def run(root: Path, args: List[str], input: str | None = None) -> Result:
    return CliRunner().invoke(
        cli,
        ["--root-path", str(root), "--keyring-path", str(root / "keyring.json"), *args],
        input=input,
        catch_exceptions=False,
    )


def test_version(tmp_path: Path) -> None:
    result = run(tmp_path, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() != ""


def test_create_list_delete(tmp_path: Path) -> None:
    result = run(tmp_path, ["wallet", "list"])
    assert result.exit_code == 0
    assert "There are no saved wallets" in result.output

    result = run(tmp_path, ["wallet", "create", "--name", "main"])
    assert result.exit_code == 0
    assert "Created wallet 'main'" in result.output
    assert (tmp_path / "keyring.json").exists()

    result = run(tmp_path, ["wallet", "list"])
    assert result.output.split() == ["main"]

    result = run(tmp_path, ["wallet", "delete", "--name", "main"])
    assert "Deleted wallet 'main'" in result.output
    result = run(tmp_path, ["wallet", "delete", "--name", "main"])
    assert result.exit_code == 0
    assert "No wallet named 'main'" in result.output


def test_import_and_show(tmp_path: Path, test_mnemonic: str) -> None:
    result = run(tmp_path, ["wallet", "import", "--name", "imported"], input=test_mnemonic + "\n")
    assert result.exit_code == 0
    assert "Imported wallet 'imported'" in result.output

    result = run(tmp_path, ["wallet", "show", "--name", "imported", "--json", "--show-mnemonic-seed"])
    assert result.exit_code == 0
    shown = json.loads(result.output[result.output.index("{") :])
    assert shown["name"] == "imported"
    assert shown["mnemonic"] == test_mnemonic
    assert shown["address"].startswith("xch1")
    assert shown["network"] == "mainnet"

    result = run(tmp_path, ["--network", "testnet11", "wallet", "show", "--name", "imported"])
    assert result.exit_code == 0
    assert "Address (testnet11): txch1" in result.output
    assert test_mnemonic not in result.output


def test_import_invalid_mnemonic(tmp_path: Path) -> None:
    result = run(tmp_path, ["wallet", "import", "--mnemonic", "not a real phrase"])
    assert result.exit_code == 1
    assert "Provided mnemonic is invalid" in result.output


def test_show_missing_wallet(tmp_path: Path) -> None:
    result = run(tmp_path, ["wallet", "show", "--name", "ghost"])
    assert result.exit_code == 1
    assert "Wallet not found: ghost" in result.output


def test_sign_and_verify(tmp_path: Path, test_mnemonic: str) -> None:
    run(tmp_path, ["wallet", "import", "--mnemonic", test_mnemonic])
    result = run(tmp_path, ["wallet", "sign", "--nonce", "12345"])
    assert result.exit_code == 0
    lines = dict(line.split(": ", 1) for line in result.output.strip().splitlines() if ": " in line)
    public_key, signature = lines["Public key"], lines["Signature"]

    result = run(tmp_path, ["wallet", "verify", "--nonce", "12345", "-s", signature, "-k", public_key])
    assert result.exit_code == 0
    assert "Signature is valid" in result.output

    result = run(tmp_path, ["wallet", "verify", "--nonce", "54321", "-s", signature, "-k", public_key])
    assert result.exit_code == 1
    assert "Signature is NOT valid" in result.output

    result = run(tmp_path, ["wallet", "verify", "--nonce", "12345", "-s", signature, "-k", public_key[:-2]])
    assert result.exit_code == 1
    assert "must be 48 bytes" in result.output


@pytest.mark.anyio
async def test_cli_wallets_load_with_the_same_config(isolated_root: Path, test_mnemonic: str) -> None:
    isolated_root.mkdir(parents=True, exist_ok=True)
    config = {"selected_network": "testnet11", "keyring_passphrase": "my private passphrase"}
    (isolated_root / "config.yaml").write_text(yaml.safe_dump(config))

    result = await anyio.to_thread.run_sync(
        run, isolated_root, ["wallet", "import", "--name", "main", "--mnemonic", test_mnemonic]
    )
    assert result.exit_code == 0

    wallet = await Wallet.load("main", create_on_undefined=False)
    assert wallet.get_mnemonic() == test_mnemonic
    assert wallet.constants.name == "testnet11"
    assert wallet.get_owner_public_key().startswith("txch1")
    assert FileKeyring.create().passphrase == "my private passphrase"

    with pytest.raises(CryptoError):
        FileKeyring(keyring_path=isolated_root / "keyring.json").get("main")
