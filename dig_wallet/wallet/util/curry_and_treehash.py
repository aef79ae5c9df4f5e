from __future__ import annotations

from hashlib import sha256
from typing import Sequence

from chia_rs.sized_bytes import bytes32

NULL = bytes.fromhex("")
ONE = bytes.fromhex("01")
TWO = bytes.fromhex("02")
Q_KW = bytes.fromhex("01")
A_KW = bytes.fromhex("02")
C_KW = bytes.fromhex("04")


def shatree_atom(atom: bytes) -> bytes32:
    return bytes32(sha256(ONE + atom).digest())


def shatree_pair(left_hash: bytes32, right_hash: bytes32) -> bytes32:
    return bytes32(sha256(TWO + left_hash + right_hash).digest())


Q_KW_TREEHASH = shatree_atom(Q_KW)
A_KW_TREEHASH = shatree_atom(A_KW)
C_KW_TREEHASH = shatree_atom(C_KW)
ONE_TREEHASH = shatree_atom(ONE)
NIL_TREEHASH = shatree_atom(NULL)


def curried_values_tree_hash(hashed_arguments: Sequence[bytes32]) -> bytes32:
    """
    Hash of the curried environment `(c (q . A0) (c (q . A1) ... 1))`, built from the innermost argument out.
    """
    ret = ONE_TREEHASH
    for argument_hash in reversed(hashed_arguments):
        ret = shatree_pair(
            C_KW_TREEHASH,
            shatree_pair(shatree_pair(Q_KW_TREEHASH, argument_hash), shatree_pair(ret, NIL_TREEHASH)),
        )
    return ret


def calculate_hash_of_quoted_mod_hash(mod_hash: bytes32) -> bytes32:
    return shatree_pair(Q_KW_TREEHASH, mod_hash)


# The curry pattern is `(a (q . MOD) ENV)`
def curry_and_treehash(hash_of_quoted_mod_hash: bytes32, *hashed_arguments: bytes32) -> bytes32:
    curried_values = curried_values_tree_hash(hashed_arguments)
    return shatree_pair(
        A_KW_TREEHASH,
        shatree_pair(hash_of_quoted_mod_hash, shatree_pair(curried_values, NIL_TREEHASH)),
    )
