from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from chia_puzzles_py.programs import CAT_PUZZLE as CAT_PUZZLE_BYTES
from chia_rs import Coin
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from dig_wallet.types.blockchain_format.program import INFINITE_COST, Program
from dig_wallet.util.errors import CoinSetError
from dig_wallet.wallet.lineage_proof import LineageProof
from dig_wallet.wallet.uncurried_puzzle import UncurriedPuzzle, uncurry_puzzle
from dig_wallet.wallet.util.curry_and_treehash import (
    calculate_hash_of_quoted_mod_hash,
    curry_and_treehash,
    shatree_atom,
)

log = logging.getLogger(__name__)

CAT_MOD = Program.from_bytes(CAT_PUZZLE_BYTES)
CAT_MOD_HASH = CAT_MOD.get_tree_hash()
CAT_MOD_HASH_HASH = shatree_atom(CAT_MOD_HASH)
QUOTED_CAT_MOD_HASH = calculate_hash_of_quoted_mod_hash(CAT_MOD_HASH)

CREATE_COIN = 51
# amount the CAT layer reserves for a melt, it does not create a child
MELT_AMOUNT = -113


@dataclass(frozen=True)
class CATPuzzle:
    asset_id: bytes32
    inner_puzzle: Program


def match_cat_puzzle(puzzle: UncurriedPuzzle) -> Optional[Iterator[Program]]:
    """
    Given the curried puzzle and args, test if it's a CAT and,
    if it is, return the curried arguments
    """
    if puzzle.mod == CAT_MOD:
        ret: Iterator[Program] = puzzle.args.as_iter()
        return ret
    else:
        return None


def parse_cat_puzzle(puzzle: Program) -> Optional[CATPuzzle]:
    args = match_cat_puzzle(uncurry_puzzle(puzzle))
    if args is None:
        return None
    try:
        _mod_hash, tail_hash, inner_puzzle = args
        return CATPuzzle(asset_id=bytes32(tail_hash.as_atom()), inner_puzzle=inner_puzzle)
    except ValueError:
        return None


def construct_cat_puzzle(asset_id: bytes32, inner_puzzle: Program) -> Program:
    return CAT_MOD.curry(CAT_MOD_HASH, asset_id, inner_puzzle)


def cat_puzzle_hash(asset_id: bytes32, inner_puzzle_hash: bytes32) -> bytes32:
    """
    Puzzle hash of a CAT of `asset_id` wrapping an inner puzzle with `inner_puzzle_hash`,
    computed without revealing the inner puzzle.
    """
    return curry_and_treehash(QUOTED_CAT_MOD_HASH, CAT_MOD_HASH_HASH, shatree_atom(asset_id), inner_puzzle_hash)


def created_coin_conditions(inner_puzzle: Program, inner_solution: Program) -> List[Program]:
    conditions = inner_puzzle.run(inner_solution, max_cost=INFINITE_COST)
    created = []
    for condition in conditions.as_iter():
        if condition.first().atom is None or condition.first().as_int() != CREATE_COIN:
            continue
        if condition.at("rrf").as_int() == MELT_AMOUNT:
            continue
        created.append(condition)
    return created


def parse_cat_lineage(
    coin: Coin,
    parent_coin: Coin,
    parent_puzzle: Program,
    parent_solution: Program,
    asset_id: Optional[bytes32] = None,
) -> LineageProof:
    """
    Replays the parent spend and checks that `coin` is one of the CAT children it creates.
    Raises CoinSetError when the parent is not a CAT of the same asset or did not create `coin`.
    """
    if parent_coin.name() != coin.parent_coin_info:
        raise CoinSetError(f"coin {coin.name().hex()} is not a child of {parent_coin.name().hex()}")
    if parent_puzzle.get_tree_hash() != parent_coin.puzzle_hash:
        raise CoinSetError(f"puzzle reveal does not match parent puzzle hash {parent_coin.puzzle_hash.hex()}")

    parent_cat = parse_cat_puzzle(parent_puzzle)
    if parent_cat is None:
        raise CoinSetError(f"parent {parent_coin.name().hex()} is not a CAT")
    if asset_id is not None and parent_cat.asset_id != asset_id:
        raise CoinSetError(f"parent asset id {parent_cat.asset_id.hex()} does not match {asset_id.hex()}")

    try:
        inner_solution = parent_solution.first()
        created = created_coin_conditions(parent_cat.inner_puzzle, inner_solution)
        for condition in created:
            inner_puzzle_hash = bytes32(condition.at("rf").as_atom())
            amount = condition.at("rrf").as_int()
            if amount == coin.amount and cat_puzzle_hash(parent_cat.asset_id, inner_puzzle_hash) == coin.puzzle_hash:
                break
        else:
            raise CoinSetError(f"parent spend did not create coin {coin.name().hex()}")
    except (ValueError, TypeError, Program.EvalError) as e:
        raise CoinSetError(f"failed to replay parent spend {parent_coin.name().hex()}: {e}") from e

    return LineageProof(
        parent_name=parent_coin.parent_coin_info,
        inner_puzzle_hash=parent_cat.inner_puzzle.get_tree_hash(),
        amount=uint64(parent_coin.amount),
    )
