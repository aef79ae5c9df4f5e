from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

from chia_rs import Coin
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint8, uint32

from dig_wallet.protocols.wallet_protocol import (
    CoinState,
    PuzzleSolutionResponse,
    RejectCoinState,
    RejectPuzzleSolution,
    RejectStateReason,
    RespondCoinState,
    RespondPuzzleSolution,
)
from dig_wallet.types.blockchain_format.program import Program
from dig_wallet.types.blockchain_format.serialized_program import SerializedProgram


class PeerUnavailable(Exception):
    pass


@dataclass
class FakePeer:
    """
    An in-memory full node. Coins are added with their creation height, and spends
    with the puzzle and solution that were revealed.
    """

    coin_states: Dict[bytes32, CoinState] = field(default_factory=dict)
    spends: Dict[bytes32, Tuple[SerializedProgram, SerializedProgram]] = field(default_factory=dict)
    offline: bool = False
    failing_coin_ids: Set[bytes32] = field(default_factory=set)
    rejected_coin_ids: Set[bytes32] = field(default_factory=set)
    failing_spend_ids: Set[bytes32] = field(default_factory=set)
    overlapping_pages: bool = False
    genesis_challenge: Optional[bytes32] = None
    calls: List[str] = field(default_factory=list)

    def check_network(self, genesis_challenge: bytes32) -> None:
        if self.offline:
            raise PeerUnavailable("peer is offline")
        if self.genesis_challenge is not None and genesis_challenge != self.genesis_challenge:
            raise PeerUnavailable(f"peer is on another network than {genesis_challenge.hex()}")

    def add_coin(self, coin: Coin, created_height: Optional[int] = 1, spent_height: Optional[int] = None) -> None:
        self.coin_states[coin.name()] = CoinState(coin, spent_height, created_height)

    def add_spend(
        self, coin: Coin, puzzle: Union[Program, bytes], solution: Union[Program, bytes], height: int
    ) -> None:
        state = self.coin_states.get(coin.name())
        created_height = 1 if state is None else state.created_height
        self.coin_states[coin.name()] = CoinState(coin, height, created_height)
        self.spends[coin.name()] = (
            SerializedProgram.from_bytes(bytes(puzzle)),
            SerializedProgram.from_bytes(bytes(solution)),
        )

    async def get_all_unspent_coins(
        self, puzzle_hash: bytes32, previous_height: Optional[uint32], genesis_challenge: bytes32
    ) -> List[CoinState]:
        self.calls.append("get_all_unspent_coins")
        self.check_network(genesis_challenge)
        unspent = [
            cs
            for cs in self.coin_states.values()
            if cs.coin.puzzle_hash == puzzle_hash and cs.spent_height is None
        ]
        if self.overlapping_pages:
            # the last page starts again from the first one
            return unspent + unspent
        return unspent

    async def is_coin_spent(self, coin_id: bytes32, last_height: Optional[uint32], genesis_challenge: bytes32) -> bool:
        self.calls.append("is_coin_spent")
        self.check_network(genesis_challenge)
        state = self.coin_states.get(coin_id)
        return state is not None and state.spent_height is not None

    async def request_coin_state(
        self,
        coin_ids: List[bytes32],
        previous_height: Optional[uint32],
        genesis_challenge: bytes32,
        subscribe: bool,
    ) -> Union[RespondCoinState, RejectCoinState]:
        self.calls.append("request_coin_state")
        self.check_network(genesis_challenge)
        if any(coin_id in self.failing_coin_ids for coin_id in coin_ids):
            raise PeerUnavailable("connection reset")
        if any(coin_id in self.rejected_coin_ids for coin_id in coin_ids):
            return RejectCoinState(uint8(RejectStateReason.REORG))
        states = [self.coin_states[coin_id] for coin_id in coin_ids if coin_id in self.coin_states]
        return RespondCoinState(coin_ids, states)

    async def request_puzzle_and_solution(
        self, coin_id: bytes32, height: uint32
    ) -> Union[RespondPuzzleSolution, RejectPuzzleSolution]:
        self.calls.append("request_puzzle_and_solution")
        if self.offline or coin_id in self.failing_spend_ids:
            raise PeerUnavailable("connection reset")
        spend = self.spends.get(coin_id)
        state = self.coin_states.get(coin_id)
        if spend is None or state is None or state.spent_height != height:
            return RejectPuzzleSolution(coin_id, height)
        puzzle, solution = spend
        return RespondPuzzleSolution(PuzzleSolutionResponse(coin_id, height, puzzle, solution))
