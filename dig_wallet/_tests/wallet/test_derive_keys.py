from __future__ import annotations

from chia_rs import AugSchemeMPL

from dig_wallet.types.blockchain_format.program import Program
from dig_wallet.util.keychain import seed_phrase_to_master_key
from dig_wallet.wallet.derive_keys import (
    master_key_to_fingerprint,
    master_key_to_synthetic_key_pair,
    master_pk_to_synthetic_public_key,
    master_pk_to_wallet_pk_unhardened,
    master_sk_to_wallet_sk_unhardened,
    synthetic_public_key_to_puzzle_hash,
)
from dig_wallet.wallet.puzzles.p2_delegated_puzzle_or_hidden_puzzle import (
    DEFAULT_HIDDEN_PUZZLE_HASH,
    MOD,
    calculate_synthetic_public_key,
    puzzle_for_synthetic_public_key,
    puzzle_hash_for_pk,
)


def test_wallet_key_path(test_mnemonic: str) -> None:
    master = seed_phrase_to_master_key(test_mnemonic)
    expected = master
    for index in [12381, 8444, 2, 0]:
        expected = AugSchemeMPL.derive_child_sk_unhardened(expected, index)
    assert master_sk_to_wallet_sk_unhardened(master) == expected
    assert master_pk_to_wallet_pk_unhardened(master.get_g1()) == expected.get_g1()


def test_synthetic_key_pair(test_mnemonic: str) -> None:
    master = seed_phrase_to_master_key(test_mnemonic)
    synthetic_sk, synthetic_pk = master_key_to_synthetic_key_pair(master)
    assert synthetic_sk.get_g1() == synthetic_pk

    wallet_pk = master_sk_to_wallet_sk_unhardened(master).get_g1()
    assert synthetic_pk != wallet_pk
    assert calculate_synthetic_public_key(wallet_pk, DEFAULT_HIDDEN_PUZZLE_HASH) == synthetic_pk
    # the public half can be derived without the secret key
    assert master_pk_to_synthetic_public_key(master.get_g1()) == synthetic_pk

    again_sk, again_pk = master_key_to_synthetic_key_pair(seed_phrase_to_master_key(test_mnemonic))
    assert bytes(again_sk) == bytes(synthetic_sk)
    assert bytes(again_pk) == bytes(synthetic_pk)


def test_puzzle_hash_matches_curried_puzzle(test_mnemonic: str) -> None:
    master = seed_phrase_to_master_key(test_mnemonic)
    _, synthetic_pk = master_key_to_synthetic_key_pair(master)
    puzzle_hash = synthetic_public_key_to_puzzle_hash(synthetic_pk)
    assert puzzle_hash == puzzle_for_synthetic_public_key(synthetic_pk).get_tree_hash()
    assert puzzle_hash == MOD.curry(bytes(synthetic_pk)).get_tree_hash()
    assert puzzle_hash == puzzle_hash_for_pk(master_sk_to_wallet_sk_unhardened(master).get_g1())


def test_default_hidden_puzzle_hash() -> None:
    assert DEFAULT_HIDDEN_PUZZLE_HASH == Program.to([9]).get_tree_hash()


def test_fingerprint(test_mnemonic: str) -> None:
    master = seed_phrase_to_master_key(test_mnemonic)
    assert master_key_to_fingerprint(master) == master.get_g1().get_fingerprint()
