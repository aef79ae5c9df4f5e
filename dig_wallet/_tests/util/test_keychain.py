from __future__ import annotations

from secrets import token_bytes

import pytest

from dig_wallet.util.errors import InvalidMnemonic, MnemonicRequired
from dig_wallet.util.keychain import (
    bip39_word_list,
    bytes_from_mnemonic,
    bytes_to_mnemonic,
    check_mnemonic_validity,
    generate_mnemonic,
    mnemonic_to_seed,
    normalize_mnemonic,
    seed_phrase_to_master_key,
)


def test_word_list() -> None:
    words = bip39_word_list()
    assert len(words) == 2048
    assert words[0] == "abandon"
    assert words[-1] == "zoo"


def test_generate_mnemonic() -> None:
    mnemonic = generate_mnemonic()
    assert len(mnemonic.split(" ")) == 24
    assert check_mnemonic_validity(mnemonic)
    assert generate_mnemonic() != mnemonic


@pytest.mark.parametrize("entropy_length", [16, 20, 24, 28, 32])
def test_mnemonic_entropy(entropy_length: int) -> None:
    entropy = token_bytes(entropy_length)
    mnemonic = bytes_to_mnemonic(entropy)
    assert len(mnemonic.split(" ")) == entropy_length * 3 // 4
    assert bytes_from_mnemonic(mnemonic) == entropy


def test_all_zero_entropy(test_mnemonic: str) -> None:
    assert bytes_to_mnemonic(b"\x00" * 32) == test_mnemonic
    assert bytes_from_mnemonic(test_mnemonic) == b"\x00" * 32


def test_bad_entropy_length() -> None:
    with pytest.raises(ValueError):
        bytes_to_mnemonic(b"\x00" * 15)


def test_normalize_mnemonic(test_mnemonic: str) -> None:
    messy = "  " + test_mnemonic.upper().replace(" ", "  \t") + "\n"
    assert normalize_mnemonic(messy) == test_mnemonic
    for missing in [None, "", "   "]:
        with pytest.raises(MnemonicRequired):
            normalize_mnemonic(missing)


def test_invalid_mnemonics(test_mnemonic: str) -> None:
    words = test_mnemonic.split(" ")
    with pytest.raises(InvalidMnemonic, match="words"):
        bytes_from_mnemonic(" ".join(words[:23]))
    with pytest.raises(InvalidMnemonic, match="misspelled"):
        bytes_from_mnemonic(" ".join(words[:23] + ["artt"]))
    # every word is valid, the checksum is not
    with pytest.raises(InvalidMnemonic, match="order"):
        bytes_from_mnemonic(" ".join(["abandon"] * 24))
    assert not check_mnemonic_validity(" ".join(["abandon"] * 24))
    assert not check_mnemonic_validity(None)


def test_bip39_seed_vector() -> None:
    # BIP-39 reference vector for all-zero 128 bit entropy, passphrase "TREZOR"
    mnemonic = " ".join(["abandon"] * 11 + ["about"])
    seed = mnemonic_to_seed(mnemonic, "TREZOR")
    assert seed.hex() == (
        "c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e53495531f09a6987599d18264c1e1c92f2cf141630c7a3c4ab7c81b2f001698e7463b04"
    )


def test_master_key_is_deterministic(test_mnemonic: str) -> None:
    key_1 = seed_phrase_to_master_key(test_mnemonic)
    key_2 = seed_phrase_to_master_key(test_mnemonic)
    assert bytes(key_1) == bytes(key_2)
    assert bytes(seed_phrase_to_master_key(generate_mnemonic())) != bytes(key_1)


def test_master_key_requires_valid_mnemonic(test_mnemonic: str) -> None:
    with pytest.raises(MnemonicRequired):
        seed_phrase_to_master_key("")
    with pytest.raises(InvalidMnemonic):
        seed_phrase_to_master_key(test_mnemonic.replace("art", "abandon"))
