from __future__ import annotations

from enum import IntEnum
from typing import List, Optional, Union

import chia_rs
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint32
from typing_extensions import Protocol

"""
Messages between the wallet and a full node. Peers hand back the chia_rs message types they decoded
off the wire; puzzles and solutions travel as SerializedProgram.
"""

CoinState = chia_rs.CoinState
RespondCoinState = chia_rs.RespondCoinState
RejectCoinState = chia_rs.RejectCoinState
PuzzleSolutionResponse = chia_rs.PuzzleSolutionResponse
RespondPuzzleSolution = chia_rs.RespondPuzzleSolution
RejectPuzzleSolution = chia_rs.RejectPuzzleSolution


class RejectStateReason(IntEnum):
    REORG = 0
    EXCEEDED_SUBSCRIPTION_LIMIT = 1


class WalletPeer(Protocol):
    """
    The calls the wallet makes against a connected full node. Any of them may raise; a rejection
    that the node reports in-band comes back as the Reject* message instead.
    """

    async def get_all_unspent_coins(
        self, puzzle_hash: bytes32, previous_height: Optional[uint32], genesis_challenge: bytes32
    ) -> List[CoinState]:
        ...

    async def is_coin_spent(self, coin_id: bytes32, last_height: Optional[uint32], genesis_challenge: bytes32) -> bool:
        ...

    async def request_coin_state(
        self,
        coin_ids: List[bytes32],
        previous_height: Optional[uint32],
        genesis_challenge: bytes32,
        subscribe: bool,
    ) -> Union[RespondCoinState, RejectCoinState]:
        ...

    async def request_puzzle_and_solution(
        self, coin_id: bytes32, height: uint32
    ) -> Union[RespondPuzzleSolution, RejectPuzzleSolution]:
        ...
