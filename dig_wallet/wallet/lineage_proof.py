from __future__ import annotations

from dataclasses import dataclass

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from dig_wallet.types.blockchain_format.program import Program


@dataclass(frozen=True)
class LineageProof:
    """
    What a spend needs to know about a CAT coin's parent: the grandparent coin id,
    the parent's inner puzzle hash and the parent's amount.
    """

    parent_name: bytes32
    inner_puzzle_hash: bytes32
    amount: uint64

    def to_program(self) -> Program:
        return Program.to([self.parent_name, self.inner_puzzle_hash, self.amount])
