from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import shutil
from dataclasses import dataclass, field, replace
from hashlib import pbkdf2_hmac
from pathlib import Path
from secrets import token_bytes
from typing import Any, Dict, Optional, Set

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from typing_extensions import final

from dig_wallet.util.config import load_config
from dig_wallet.util.default_root import resolve_keyring_path, resolve_root_path
from dig_wallet.util.errors import CryptoError, FileSystemError, SerializationError
from dig_wallet.util.lock import DEFAULT_LOCK_TIMEOUT, exclusive_lock

log = logging.getLogger(__name__)

SALT_BYTES = 16  # PBKDF2 param
NONCE_BYTES = 12  # AES-GCM nonce is 12-bytes
KEY_BYTES = 32  # AES-256
HASH_ITERS = 100000  # PBKDF2 param
DEFAULT_KEYRING_PASSPHRASE = "mnemonic-seed"


def generate_nonce() -> bytes:
    """
    Creates a nonce to be used by AES-GCM. This must be called each time a value is encrypted.
    """
    return token_bytes(NONCE_BYTES)


def generate_salt() -> bytes:
    """
    Creates a salt to be used in combination with the keyring passphrase to derive
    a symmetric key using PBKDF2
    """
    return token_bytes(SALT_BYTES)


def symmetric_key_from_passphrase(passphrase: str, salt: bytes) -> bytes:
    return pbkdf2_hmac("sha256", passphrase.encode(), salt, HASH_ITERS, dklen=KEY_BYTES)


def _b64decode(value: Any, field_name: str) -> bytes:
    if not isinstance(value, str):
        raise SerializationError(f"{field_name} must be a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SerializationError(f"{field_name} is not valid base64: {e}") from e


@final
@dataclass(frozen=True)
class EncryptedEntry:
    """
    One wallet's seed phrase at rest. Salt and nonce are fresh for every write, so the
    same plaintext never produces the same entry twice.
    """

    data: bytes
    nonce: bytes
    salt: bytes

    @classmethod
    def encrypt(cls, plaintext: str, passphrase: str) -> EncryptedEntry:
        salt = generate_salt()
        nonce = generate_nonce()
        key = symmetric_key_from_passphrase(passphrase, salt)
        data = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
        return cls(data=data, nonce=nonce, salt=salt)

    def decrypt(self, passphrase: str) -> str:
        if len(self.nonce) != NONCE_BYTES:
            raise CryptoError(f"nonce must be {NONCE_BYTES} bytes, got {len(self.nonce)}")
        key = symmetric_key_from_passphrase(passphrase, self.salt)
        try:
            plaintext = AESGCM(key).decrypt(self.nonce, self.data, None)
        except InvalidTag as e:
            raise CryptoError("Decryption failed (authentication tag mismatch)") from e
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CryptoError(f"Failed to convert decrypted data to string: {e}") from e

    @classmethod
    def from_dict(cls, entry: Any) -> EncryptedEntry:
        if not isinstance(entry, dict):
            raise SerializationError("keyring entry must be an object")
        try:
            return cls(
                data=_b64decode(entry["data"], "data"),
                nonce=_b64decode(entry["nonce"], "nonce"),
                salt=_b64decode(entry["salt"], "salt"),
            )
        except KeyError as e:
            raise SerializationError(f"keyring entry is missing {e}") from e

    def to_dict(self) -> Dict[str, str]:
        return {
            "data": base64.b64encode(self.data).decode("ascii"),
            "nonce": base64.b64encode(self.nonce).decode("ascii"),
            "salt": base64.b64encode(self.salt).decode("ascii"),
        }


@dataclass
class KeyringDocument:
    wallets: Dict[str, EncryptedEntry] = field(default_factory=dict)

    @classmethod
    def from_json(cls, text: str) -> KeyringDocument:
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"keyring is not valid JSON: {e}") from e
        if not isinstance(loaded, dict) or not isinstance(loaded.get("wallets"), dict):
            raise SerializationError("keyring must be an object with a 'wallets' mapping")
        return cls({name: EncryptedEntry.from_dict(entry) for name, entry in loaded["wallets"].items()})

    def to_json(self) -> str:
        return json.dumps({"wallets": {name: entry.to_dict() for name, entry in self.wallets.items()}}, indent=2)


@final
@dataclass
class FileKeyring:
    """
    FileKeyring persists every wallet's encrypted seed phrase in a single JSON document. Each mutation
    re-reads the document from disk, changes one entry and atomically replaces the file while holding
    an exclusive lock, so other wallets' entries survive concurrent writers and interrupted writes.
    """

    keyring_path: Path
    passphrase: str = DEFAULT_KEYRING_PASSPHRASE
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    @classmethod
    def from_config(
        cls, root_path: Path, config: Dict[str, Any], keyring_path: Optional[Path] = None
    ) -> FileKeyring:
        """
        The keyring named by `keyring_filename` under the root, opened with `keyring_passphrase`.
        """
        return cls(
            keyring_path=resolve_keyring_path(
                root_path=root_path, override=keyring_path, filename=config["keyring_filename"]
            ),
            passphrase=config["keyring_passphrase"],
        )

    @classmethod
    def create(
        cls,
        root_path: Optional[Path] = None,
        keyring_path: Optional[Path] = None,
        passphrase: Optional[str] = None,
    ) -> FileKeyring:
        root_path = resolve_root_path(override=root_path)
        keyring = cls.from_config(root_path, load_config(root_path), keyring_path)
        if passphrase is not None:
            return replace(keyring, passphrase=passphrase)
        return keyring

    def load(self) -> KeyringDocument:
        """
        Reads the document without taking the lock. A missing file is an empty keyring.
        """
        try:
            text = self.keyring_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return KeyringDocument()
        except OSError as e:
            raise FileSystemError(f"failed to read keyring: {e}", self.keyring_path) from e
        return KeyringDocument.from_json(text)

    def write(self, document: KeyringDocument) -> None:
        # This must be called under the keyring lock
        temp_path = self.keyring_path.with_suffix("." + str(os.getpid()))
        try:
            self.keyring_path.parent.mkdir(parents=True, exist_ok=True)
            with open(os.open(str(temp_path), os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600), "w") as f:
                f.write(document.to_json())
            try:
                os.replace(str(temp_path), self.keyring_path)
            except PermissionError:
                shutil.move(str(temp_path), str(self.keyring_path))
        except OSError as e:
            raise FileSystemError(f"failed to write keyring: {e}", self.keyring_path) from e
        finally:
            temp_path.unlink(missing_ok=True)

    def get(self, name: str) -> Optional[str]:
        entry = self.load().wallets.get(name)
        if entry is None:
            return None
        return entry.decrypt(self.passphrase)

    def put(self, name: str, seed_phrase: str) -> None:
        entry = EncryptedEntry.encrypt(seed_phrase, self.passphrase)
        with exclusive_lock(self.keyring_path, timeout=self.lock_timeout):
            document = self.load()
            document.wallets[name] = entry
            self.write(document)
        log.info(f"Stored wallet {name!r} in {self.keyring_path}")

    def remove(self, name: str) -> bool:
        if not self.keyring_path.exists():
            return False
        with exclusive_lock(self.keyring_path, timeout=self.lock_timeout):
            document = self.load()
            if document.wallets.pop(name, None) is None:
                return False
            self.write(document)
        log.info(f"Removed wallet {name!r} from {self.keyring_path}")
        return True

    def list_names(self) -> Set[str]:
        return set(self.load().wallets)
