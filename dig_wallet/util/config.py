from __future__ import annotations

import copy
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from chia_rs.sized_bytes import bytes32

from dig_wallet.util.byte_types import hexstr_to_bytes
from dig_wallet.util.default_root import resolve_root_path
from dig_wallet.util.errors import FileSystemError, SerializationError
from dig_wallet.util.lock import exclusive_lock

log = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "selected_network": "mainnet",
    "network_overrides": {
        "mainnet": {
            "genesis_challenge": "ccd5bb71183532bff220ba46c268991a3ff07eb358e8255a65c30a2dce0e5fbb",
            "address_prefix": "xch",
        },
        "testnet11": {
            "genesis_challenge": "37a90eb5185a9c4439a91ddc98bbadce7b4feba060d50116a067de66bf236615",
            "address_prefix": "txch",
        },
    },
    "keyring_filename": "keyring.json",
    # set a private passphrase to keep seed phrases unreadable without it
    "keyring_passphrase": "mnemonic-seed",
    "logging": {
        "log_stdout": True,
        "log_level": "WARNING",
        "log_filename": "log/debug.log",
        "log_maxfilesrotation": 7,
        "log_maxbytesrotation": 50 * 1024 * 1024,
    },
}


@dataclass(frozen=True)
class NetworkConstants:
    name: str
    genesis_challenge: bytes32
    address_prefix: str


def config_path_for_filename(root_path: Path, filename: Union[str, Path]) -> Path:
    path_filename = Path(filename)
    if path_filename.is_absolute():
        return path_filename
    return root_path / filename


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(root_path: Path, filename: Union[str, Path] = CONFIG_FILENAME) -> Dict[str, Any]:
    """
    Returns the defaults overlaid with whatever the config file provides. A missing file is not an error.
    """
    path = config_path_for_filename(root_path, filename)
    if not path.is_file():
        log.debug(f"no config at {path}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)
    try:
        with exclusive_lock(path):
            with open(path) as opened_config_file:
                loaded = yaml.safe_load(opened_config_file)
    except OSError as e:
        raise FileSystemError(f"failed to read config: {e}", path) from e
    except yaml.YAMLError as e:
        raise SerializationError(f"config {path} is not valid YAML: {e}") from e
    if loaded is None:
        log.error(f"yaml.safe_load returned None: {path}")
        loaded = {}
    if not isinstance(loaded, dict):
        raise SerializationError(f"config {path} must be a mapping")
    return _merge(DEFAULT_CONFIG, loaded)


def save_config(root_path: Path, config_data: Dict[str, Any], filename: Union[str, Path] = CONFIG_FILENAME) -> None:
    path = config_path_for_filename(root_path, filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    with exclusive_lock(path):
        with tempfile.TemporaryDirectory(dir=path.parent) as tmp_dir:
            tmp_path = Path(tmp_dir) / path.name
            with open(tmp_path, "w") as f:
                yaml.safe_dump(config_data, f)
            try:
                os.replace(str(tmp_path), path)
            except PermissionError:
                shutil.move(str(tmp_path), str(path))


def get_network_constants(config: Dict[str, Any], network: str | None = None) -> NetworkConstants:
    selected = network if network is not None else config["selected_network"]
    overrides = config["network_overrides"]
    if selected not in overrides:
        raise ValueError(f"unknown network {selected!r}, expected one of {sorted(overrides)}")
    network_config = overrides[selected]
    return NetworkConstants(
        name=selected,
        genesis_challenge=bytes32(hexstr_to_bytes(network_config["genesis_challenge"])),
        address_prefix=network_config["address_prefix"],
    )


def load_network_constants(root_path: Optional[Path] = None, network: Optional[str] = None) -> NetworkConstants:
    """
    Constants of `network`, or of the config's selected_network, for the config under the root.
    """
    root_path = resolve_root_path(override=root_path)
    return get_network_constants(load_config(root_path), network)
