"""
Pay to delegated puzzle or hidden puzzle, the "standard coin".

The wallet public key is morphed by adding an offset derived from the hash of the hidden
puzzle and itself, giving a "synthetic" public key. Coins a wallet can receive are locked
by this puzzle curried with the synthetic key, so the address of a key is the tree hash of
that curried puzzle.
"""
from __future__ import annotations

import hashlib

from chia_puzzles_py.programs import P2_DELEGATED_PUZZLE_OR_HIDDEN_PUZZLE as P2_DELEGATED_PUZZLE_OR_HIDDEN_PUZZLE_BYTES
from chia_rs import G1Element, PrivateKey
from chia_rs.sized_bytes import bytes32
from clvm.casts import int_from_bytes

from dig_wallet.types.blockchain_format.program import Program
from dig_wallet.wallet.util.curry_and_treehash import calculate_hash_of_quoted_mod_hash, curry_and_treehash

DEFAULT_HIDDEN_PUZZLE = Program.from_bytes(bytes.fromhex("ff0980"))

DEFAULT_HIDDEN_PUZZLE_HASH = DEFAULT_HIDDEN_PUZZLE.get_tree_hash()  # this puzzle `(x)` always fails

MOD = Program.from_bytes(P2_DELEGATED_PUZZLE_OR_HIDDEN_PUZZLE_BYTES)

QUOTED_MOD_HASH = calculate_hash_of_quoted_mod_hash(MOD.get_tree_hash())

GROUP_ORDER = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001


def calculate_synthetic_offset(public_key: G1Element, hidden_puzzle_hash: bytes32) -> int:
    blob = hashlib.sha256(bytes(public_key) + hidden_puzzle_hash).digest()
    offset = int_from_bytes(blob)
    offset %= GROUP_ORDER
    return offset


def calculate_synthetic_public_key(
    public_key: G1Element, hidden_puzzle_hash: bytes32 = DEFAULT_HIDDEN_PUZZLE_HASH
) -> G1Element:
    synthetic_offset: PrivateKey = PrivateKey.from_bytes(
        calculate_synthetic_offset(public_key, hidden_puzzle_hash).to_bytes(32, "big")
    )
    return public_key + synthetic_offset.get_g1()


def calculate_synthetic_secret_key(
    secret_key: PrivateKey, hidden_puzzle_hash: bytes32 = DEFAULT_HIDDEN_PUZZLE_HASH
) -> PrivateKey:
    secret_exponent = int.from_bytes(bytes(secret_key), "big")
    public_key = secret_key.get_g1()
    synthetic_offset = calculate_synthetic_offset(public_key, hidden_puzzle_hash)
    synthetic_secret_exponent = (secret_exponent + synthetic_offset) % GROUP_ORDER
    blob = synthetic_secret_exponent.to_bytes(32, "big")
    return PrivateKey.from_bytes(blob)


def puzzle_for_synthetic_public_key(synthetic_public_key: G1Element) -> Program:
    return MOD.curry(bytes(synthetic_public_key))


def puzzle_hash_for_synthetic_public_key(synthetic_public_key: G1Element) -> bytes32:
    public_key_hash = Program.to(bytes(synthetic_public_key)).get_tree_hash()
    return curry_and_treehash(QUOTED_MOD_HASH, public_key_hash)


def puzzle_hash_for_pk(public_key: G1Element) -> bytes32:
    return puzzle_hash_for_synthetic_public_key(calculate_synthetic_public_key(public_key))
