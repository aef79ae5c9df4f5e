from __future__ import annotations

from typing import List, Tuple

from chia_rs import AugSchemeMPL, G1Element, PrivateKey
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint32

from dig_wallet.wallet.puzzles.p2_delegated_puzzle_or_hidden_puzzle import (
    DEFAULT_HIDDEN_PUZZLE_HASH,
    calculate_synthetic_public_key,
    calculate_synthetic_secret_key,
    puzzle_hash_for_synthetic_public_key,
)

# EIP 2334 bls key derivation
# https://eips.ethereum.org/EIPS/eip-2334
# 12381 = bls spec number
# 8444 = Chia blockchain number and port number
# 2 = wallet key
WALLET_KEY_PATH_PREFIX = [12381, 8444, 2]
DEFAULT_WALLET_INDEX = uint32(0)


def _derive_path_unhardened(sk: PrivateKey, path: List[int]) -> PrivateKey:
    for index in path:
        sk = AugSchemeMPL.derive_child_sk_unhardened(sk, index)
    return sk


def _derive_pk_unhardened(pk: G1Element, path: List[int]) -> G1Element:
    for index in path:
        pk = AugSchemeMPL.derive_child_pk_unhardened(pk, index)
    return pk


def master_sk_to_wallet_sk_unhardened(master: PrivateKey, index: uint32 = DEFAULT_WALLET_INDEX) -> PrivateKey:
    return _derive_path_unhardened(master, WALLET_KEY_PATH_PREFIX + [index])


def master_pk_to_wallet_pk_unhardened(master: G1Element, index: uint32 = DEFAULT_WALLET_INDEX) -> G1Element:
    return _derive_pk_unhardened(master, WALLET_KEY_PATH_PREFIX + [index])


def master_key_to_synthetic_key_pair(master: PrivateKey) -> Tuple[PrivateKey, G1Element]:
    """
    Derives the first unhardened wallet key and offsets it by the default hidden puzzle.
    The public half equals the synthetic public key computed from the wallet public key alone.
    """
    wallet_sk = master_sk_to_wallet_sk_unhardened(master)
    synthetic_sk = calculate_synthetic_secret_key(wallet_sk, DEFAULT_HIDDEN_PUZZLE_HASH)
    return synthetic_sk, synthetic_sk.get_g1()


def master_pk_to_synthetic_public_key(master: G1Element) -> G1Element:
    return calculate_synthetic_public_key(master_pk_to_wallet_pk_unhardened(master), DEFAULT_HIDDEN_PUZZLE_HASH)


def synthetic_public_key_to_puzzle_hash(synthetic_public_key: G1Element) -> bytes32:
    return puzzle_hash_for_synthetic_public_key(synthetic_public_key)


def master_key_to_fingerprint(master: PrivateKey) -> uint32:
    return uint32(master.get_g1().get_fingerprint())
