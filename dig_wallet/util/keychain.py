from __future__ import annotations

import unicodedata
from functools import lru_cache
from hashlib import pbkdf2_hmac
from secrets import token_bytes
from typing import Dict, List, Optional

from bitstring import BitArray
from chia_rs import AugSchemeMPL, PrivateKey
from mnemonic import Mnemonic

from dig_wallet.util.errors import InvalidMnemonic, MnemonicRequired
from dig_wallet.util.hash import std_hash

VALID_WORD_COUNTS = [12, 15, 18, 21, 24]
DEFAULT_ENTROPY_BYTES = 32  # 24 words


@lru_cache(maxsize=1)
def bip39_word_list() -> List[str]:
    words: List[str] = list(Mnemonic("english").wordlist)
    assert len(words) == 2048
    return words


@lru_cache(maxsize=1)
def _word_indexes() -> Dict[str, int]:
    return {word: i for i, word in enumerate(bip39_word_list())}


def generate_mnemonic(entropy_bytes: int = DEFAULT_ENTROPY_BYTES) -> str:
    return bytes_to_mnemonic(token_bytes(entropy_bytes))


def bytes_to_mnemonic(mnemonic_bytes: bytes) -> str:
    if len(mnemonic_bytes) not in [16, 20, 24, 28, 32]:
        raise ValueError(
            f"Data length should be one of the following: [16, 20, 24, 28, 32], but it is {len(mnemonic_bytes)}."
        )
    word_list = bip39_word_list()
    CS = len(mnemonic_bytes) // 4

    checksum = BitArray(bytes(std_hash(mnemonic_bytes)))[:CS]

    bitarray = BitArray(mnemonic_bytes) + checksum
    assert len(bitarray) % 11 == 0

    return " ".join(word_list[bitarray[i : i + 11].uint] for i in range(0, len(bitarray), 11))


def normalize_mnemonic(mnemonic_str: Optional[str]) -> str:
    """
    Collapses runs of whitespace and lowercases; raises MnemonicRequired for a missing or blank phrase.
    """
    if mnemonic_str is None or len(mnemonic_str.strip()) == 0:
        raise MnemonicRequired()
    return " ".join(unicodedata.normalize("NFKD", mnemonic_str).lower().split())


def bytes_from_mnemonic(mnemonic_str: str) -> bytes:
    """
    Checks every word against the BIP-39 English list and verifies the checksum bits.
    Returns the entropy the phrase encodes.
    """
    mnemonic: List[str] = normalize_mnemonic(mnemonic_str).split(" ")
    if len(mnemonic) not in VALID_WORD_COUNTS:
        raise InvalidMnemonic(f"expected one of {VALID_WORD_COUNTS} words, got {len(mnemonic)}")

    word_indexes = _word_indexes()
    bit_array = BitArray()
    for word in mnemonic:
        value = word_indexes.get(word)
        if value is None:
            raise InvalidMnemonic(f"{word!r} is not in the mnemonic dictionary; may be misspelled")
        bit_array.append(BitArray(uint=value, length=11))

    CS: int = len(mnemonic) // 3
    ENT: int = len(mnemonic) * 11 - CS
    assert ENT % 32 == 0

    entropy_bytes: bytes = bit_array[:ENT].bytes
    checksum_bytes = bit_array[ENT:]
    checksum = BitArray(std_hash(entropy_bytes))[:CS]

    if checksum != checksum_bytes:
        raise InvalidMnemonic("invalid order of mnemonic words")

    return entropy_bytes


def check_mnemonic_validity(mnemonic_str: Optional[str]) -> bool:
    try:
        bytes_from_mnemonic(mnemonic_str or "")
    except (InvalidMnemonic, MnemonicRequired):
        return False
    return True


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """
    Uses BIP39 standard to derive a seed from a mnemonic.
    """
    salt = unicodedata.normalize("NFKD", "mnemonic" + passphrase).encode("utf-8")
    mnemonic_normalized = unicodedata.normalize("NFKD", mnemonic).encode("utf-8")
    seed = pbkdf2_hmac("sha512", mnemonic_normalized, salt, 2048)

    assert len(seed) == 64
    return seed


def seed_phrase_to_master_key(mnemonic: Optional[str]) -> PrivateKey:
    """
    Validates the phrase, then runs the BIP-39 seed through EIP-2333 key_gen. The same phrase always
    yields the same key.
    """
    normalized = normalize_mnemonic(mnemonic)
    bytes_from_mnemonic(normalized)
    return AugSchemeMPL.key_gen(mnemonic_to_seed(normalized))
