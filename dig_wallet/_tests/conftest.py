from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from dig_wallet.util.file_keyring import FileKeyring

TEST_MNEMONIC = " ".join(["abandon"] * 23 + ["art"])


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    root = tmp_path / "dig_root"
    monkeypatch.setenv("DIG_ROOT", str(root))
    monkeypatch.setenv("DIG_KEYRING_PATH", str(root / "keyring.json"))
    yield root


@pytest.fixture(scope="function")
def keyring(tmp_path: Path) -> FileKeyring:
    return FileKeyring(keyring_path=tmp_path / "keys" / "keyring.json")


@pytest.fixture(scope="session")
def test_mnemonic() -> str:
    return TEST_MNEMONIC
