from __future__ import annotations

from typing import List, Tuple

from chia_rs import Coin
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from dig_wallet._tests.util.fake_peer import FakePeer
from dig_wallet.types.blockchain_format.program import Program
from dig_wallet.util.hash import std_hash
from dig_wallet.wallet.cat_wallet.cat_utils import cat_puzzle_hash, construct_cat_puzzle

ANYONE_CAN_SPEND_PUZZLE = Program.to(1)  # simply return the conditions


def spend_cat_parent(
    peer: FakePeer,
    asset_id: bytes32,
    outputs: List[Tuple[bytes32, int]],
    height: int = 10,
    seed: bytes = b"grandparent",
) -> Tuple[Coin, List[Coin]]:
    """
    Adds a spent CAT parent whose anyone-can-spend inner puzzle creates one CAT child per
    (inner puzzle hash, amount) in `outputs`. Returns the parent and the children.
    """
    parent_puzzle = construct_cat_puzzle(asset_id, ANYONE_CAN_SPEND_PUZZLE)
    parent_coin = Coin(std_hash(seed), parent_puzzle.get_tree_hash(), uint64(sum(a for _, a in outputs)))
    inner_solution = Program.to([[51, inner_puzzle_hash, amount] for inner_puzzle_hash, amount in outputs])
    peer.add_coin(parent_coin, created_height=height - 1)
    peer.add_spend(parent_coin, parent_puzzle, Program.to([inner_solution]), height)

    children = []
    for inner_puzzle_hash, amount in outputs:
        child = Coin(parent_coin.name(), cat_puzzle_hash(asset_id, inner_puzzle_hash), uint64(amount))
        peer.add_coin(child, created_height=height)
        children.append(child)
    return parent_coin, children


def spend_plain_parent(
    peer: FakePeer,
    child_puzzle_hash: bytes32,
    amount: int,
    height: int = 10,
    seed: bytes = b"plain grandparent",
) -> Tuple[Coin, Coin]:
    """
    A parent that is not a CAT at all, creating a coin that merely sits at a CAT puzzle hash.
    """
    parent_coin = Coin(std_hash(seed), ANYONE_CAN_SPEND_PUZZLE.get_tree_hash(), uint64(amount))
    solution = Program.to([[51, child_puzzle_hash, amount]])
    peer.add_coin(parent_coin, created_height=height - 1)
    peer.add_spend(parent_coin, ANYONE_CAN_SPEND_PUZZLE, solution, height)
    child = Coin(parent_coin.name(), child_puzzle_hash, uint64(amount))
    peer.add_coin(child, created_height=height)
    return parent_coin, child
