from __future__ import annotations

import json
import os
from pathlib import Path
from threading import Thread
from typing import List

import pytest

from dig_wallet.util.errors import CryptoError, FileSystemError, LockTimeout, SerializationError
from dig_wallet.util.file_keyring import EncryptedEntry, FileKeyring, KeyringDocument
from dig_wallet.util.lock import exclusive_lock


def test_encrypt_is_not_deterministic() -> None:
    entry_1 = EncryptedEntry.encrypt("secret words", "passphrase")
    entry_2 = EncryptedEntry.encrypt("secret words", "passphrase")
    assert entry_1.data != entry_2.data
    assert entry_1.nonce != entry_2.nonce
    assert entry_1.salt != entry_2.salt
    assert entry_1.decrypt("passphrase") == "secret words"
    assert entry_2.decrypt("passphrase") == "secret words"


def test_decrypt_detects_tampering() -> None:
    entry = EncryptedEntry.encrypt("secret words", "passphrase")
    flipped = bytes([entry.data[0] ^ 1]) + entry.data[1:]
    with pytest.raises(CryptoError):
        EncryptedEntry(flipped, entry.nonce, entry.salt).decrypt("passphrase")
    with pytest.raises(CryptoError):
        EncryptedEntry(entry.data[:-1], entry.nonce, entry.salt).decrypt("passphrase")
    with pytest.raises(CryptoError):
        entry.decrypt("another passphrase")


def test_empty_keyring(keyring: FileKeyring) -> None:
    assert not keyring.keyring_path.exists()
    assert keyring.load().wallets == {}
    assert keyring.get("default") is None
    assert keyring.list_names() == set()
    assert keyring.remove("default") is False


def test_put_get_remove(keyring: FileKeyring) -> None:
    keyring.put("alice", "alice words")
    keyring.put("bob", "bob words")
    assert keyring.get("alice") == "alice words"
    assert keyring.get("bob") == "bob words"
    assert keyring.list_names() == {"alice", "bob"}

    assert keyring.remove("alice") is True
    assert keyring.remove("alice") is False
    assert keyring.list_names() == {"bob"}
    assert keyring.get("bob") == "bob words"


def test_names_are_case_sensitive(keyring: FileKeyring) -> None:
    keyring.put("Alice", "upper")
    keyring.put("alice", "lower")
    assert keyring.get("Alice") == "upper"
    assert keyring.get("alice") == "lower"


def test_document_shape(keyring: FileKeyring) -> None:
    keyring.put("default", "some words")
    contents = json.loads(keyring.keyring_path.read_text())
    assert set(contents) == {"wallets"}
    assert set(contents["wallets"]["default"]) == {"data", "nonce", "salt"}
    assert "some words" not in keyring.keyring_path.read_text()
    if os.name != "nt":
        assert keyring.keyring_path.stat().st_mode & 0o777 == 0o600


def test_document_round_trip() -> None:
    document = KeyringDocument({"default": EncryptedEntry.encrypt("words", "pw")})
    loaded = KeyringDocument.from_json(document.to_json())
    assert loaded == document


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"wallets": []}',
        '{"wallets": {"default": "abc"}}',
        '{"wallets": {"default": {"data": "AAAA", "nonce": "AAAA"}}}',
        '{"wallets": {"default": {"data": "!!", "nonce": "AAAA", "salt": "AAAA"}}}',
    ],
)
def test_malformed_documents(keyring: FileKeyring, text: str) -> None:
    keyring.keyring_path.parent.mkdir(parents=True, exist_ok=True)
    keyring.keyring_path.write_text(text)
    with pytest.raises(SerializationError):
        keyring.get("default")


def test_other_passphrase_cannot_read(keyring: FileKeyring) -> None:
    keyring.put("default", "some words")
    other = FileKeyring(keyring_path=keyring.keyring_path, passphrase="something else")
    with pytest.raises(CryptoError):
        other.get("default")


def test_concurrent_puts_keep_every_wallet(keyring: FileKeyring) -> None:
    names = [f"wallet-{i}" for i in range(8)]
    errors: List[BaseException] = []

    def put(name: str) -> None:
        try:
            FileKeyring(keyring_path=keyring.keyring_path).put(name, f"{name} words")
        except BaseException as e:
            errors.append(e)

    threads = [Thread(target=put, args=(name,)) for name in names]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert keyring.list_names() == set(names)
    for name in names:
        assert keyring.get(name) == f"{name} words"


def test_lock_timeout(tmp_path: Path) -> None:
    path = tmp_path / "keyring.json"
    keyring = FileKeyring(keyring_path=path, lock_timeout=0.1)
    with exclusive_lock(path):
        result: List[BaseException] = []

        def put() -> None:
            try:
                keyring.put("default", "words")
            except LockTimeout as e:
                result.append(e)

        thread = Thread(target=put)
        thread.start()
        thread.join()
    assert len(result) == 1
    assert keyring.get("default") is None


def test_failed_write_leaves_no_temp_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "keyring.json"
    keyring = FileKeyring(keyring_path=path)
    keyring.put("default", "words")

    def fail_replace(src: object, dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail_replace)
    with pytest.raises(FileSystemError, match="disk full"):
        keyring.put("other", "more words")
    monkeypatch.undo()

    assert keyring.list_names() == {"default"}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["keyring.json", "keyring.json.lock"]


def test_create_uses_keyring_path_override(tmp_path: Path) -> None:
    keyring = FileKeyring.create(root_path=tmp_path, keyring_path=tmp_path / "elsewhere.json")
    assert keyring.keyring_path == (tmp_path / "elsewhere.json").resolve()
